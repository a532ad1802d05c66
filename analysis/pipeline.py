# analysis/pipeline.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import pandas as pd

from config import FATAL_COLUMN, RACE_COLUMN, REGION_COLUMN, REGION_POPULATION, REGRESSION_RACES
from quality.errors import AnalysisError

from .aggregate import group_proportions, require_columns
from .fatality import fatality_independence, lethal_rates, per_capita_rates
from .regression import RegressionReport, fit_rate_model

log = logging.getLogger(__name__)


@dataclass
class ReportBundle:
    region_rates: pd.DataFrame  # per region: count, lethal_count, lethal_rate (fraction)
    region_race: pd.DataFrame  # per region x race: count, proportion within region
    race_region_rates: pd.DataFrame  # per race x region: lethal_rate (percentage)
    per_capita: pd.DataFrame | None = None
    independence: dict | None = None
    regression: RegressionReport | None = None
    regression_error: Exception | None = None
    per_capita_error: Exception | None = None


def build_report(
    incidents: pd.DataFrame,
    races: Iterable[str] | None = REGRESSION_RACES,
    population: Mapping[str, int] | None = REGION_POPULATION,
    reference: Mapping[str, str] | None = None,
) -> ReportBundle:
    """
    Build every data product from a normalized incident table.

    Errors in the descriptive tables propagate. Per-capita and regression
    failures are logged and kept on the bundle so the tables are still returned.
    """
    require_columns(incidents, [REGION_COLUMN, RACE_COLUMN, FATAL_COLUMN])

    region_rates = lethal_rates(incidents, REGION_COLUMN)
    region_race = group_proportions(incidents, [REGION_COLUMN, RACE_COLUMN])
    race_region_rates = lethal_rates(incidents, [RACE_COLUMN, REGION_COLUMN], percent=True)

    per_capita, per_capita_error = None, None
    if population:
        try:
            per_capita = per_capita_rates(incidents, REGION_COLUMN, population)
        except KeyError as e:
            log.warning("Per-capita rates not computed: %s", e)
            per_capita_error = e

    independence = fatality_independence(incidents, REGION_COLUMN)

    bundle = ReportBundle(
        region_rates=region_rates,
        region_race=region_race,
        race_region_rates=race_region_rates,
        per_capita=per_capita,
        per_capita_error=per_capita_error,
        independence=independence,
    )

    allow = {RACE_COLUMN: list(races)} if races is not None else {}
    try:
        bundle.regression = fit_rate_model(
            race_region_rates,
            response="lethal_rate",
            predictors=(RACE_COLUMN, REGION_COLUMN),
            allow=allow,
            reference=reference,
        )
    except (AnalysisError, ValueError) as e:
        log.warning("Regression not run: %s", e)
        bundle.regression_error = e
    return bundle
