# analysis/fatality.py
from __future__ import annotations

from collections.abc import Iterable, Mapping

import numpy as np
import pandas as pd
from scipy.stats import chi2_contingency

from config import FATAL_COLUMN, FRACTION_DECIMALS, PERCENT_DECIMALS
from normalize import coerce_fatal_flag
from quality.errors import EmptyGroup

from .aggregate import group_counts, group_keys, require_columns


def rate_decimals(percent: bool) -> int:
    # 0.183 as a fraction, 18.3 as a percentage
    return PERCENT_DECIMALS if percent else FRACTION_DECIMALS


def apply_lethal_rate(grouped: pd.DataFrame, percent: bool = False) -> pd.DataFrame:
    """
    Add `lethal_rate` = lethal_count / count to a grouped table that already
    carries both columns. The table's attrs record which scale was used.
    """
    require_columns(grouped, ["count", "lethal_count"])
    empty = grouped["count"] <= 0
    if empty.any():
        key_cols = [c for c in grouped.columns if c not in {"count", "lethal_count", "proportion", "lethal_rate"}]
        raise EmptyGroup(tuple(grouped.loc[empty, key_cols].iloc[0]))
    out = grouped.copy()
    out["lethal_rate"] = out["lethal_count"] / out["count"]
    if percent:
        out["lethal_rate"] = 100.0 * out["lethal_rate"]
    out.attrs["percent"] = percent
    return out


def lethal_rates(
    df: pd.DataFrame,
    keys: str | Iterable[str],
    flag_column: str = FATAL_COLUMN,
    percent: bool = False,
) -> pd.DataFrame:
    """count, lethal_count and lethal_rate per group (full precision)."""
    keys = group_keys(keys)
    require_columns(df, [*keys, flag_column])
    d = df.dropna(subset=list(keys))
    fatal = coerce_fatal_flag(d[flag_column], strict=True, column=flag_column)
    lethal = (
        d.assign(**{flag_column: fatal})
        .groupby(list(keys), observed=True)[flag_column]
        .sum()
        .rename("lethal_count")
        .reset_index()
    )
    ct = group_counts(d, keys).merge(lethal, on=list(keys), how="left")
    ct["lethal_count"] = ct["lethal_count"].fillna(0).astype(int)
    return apply_lethal_rate(ct, percent=percent)


def per_capita_rates(
    df: pd.DataFrame,
    key: str,
    population: Mapping[str, int],
    per: int = 1000,
) -> pd.DataFrame:
    """Incidents per `per` residents for each group of `key`."""
    ct = group_counts(df, key)
    missing = [g for g in ct[key] if g not in population]
    if missing:
        raise KeyError(f"Missing population for: {missing}")
    ct["population"] = ct[key].map(population).astype(int)
    ct["per_capita"] = ct["count"] / (ct["population"] / per)
    return ct


def fatality_independence(
    df: pd.DataFrame,
    key: str,
    flag_column: str = FATAL_COLUMN,
) -> dict:
    """
    Chi-square test of independence between `key` and the fatal outcome.
    Returns chi2/df/p_value, all None when a row or column of the table sums to zero.
    """
    require_columns(df, [key, flag_column])
    d = df.dropna(subset=[key])
    fatal = coerce_fatal_flag(d[flag_column], strict=True, column=flag_column).astype(bool)
    xt = pd.crosstab(d[key], fatal).reindex(columns=[False, True], fill_value=0)
    xt.columns = ["Nonfatal", "Fatal"]

    payload = {"table": xt, "chi2": None, "df": None, "p_value": None}
    row_sums = xt.sum(axis=1).to_numpy()
    col_sums = xt.sum(axis=0).to_numpy()
    if len(xt) < 2 or not ((row_sums > 0).all() and (col_sums > 0).all()):
        return payload

    chi2, p, dof, expected = chi2_contingency(xt.to_numpy(), correction=False)
    expected = np.asarray(expected, dtype=float)
    payload.update(
        {
            "chi2": float(chi2),
            "df": int(dof),
            "p_value": float(p),
            "expected_counts": expected,
        }
    )
    return payload
