# analysis/regression.py
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from quality.errors import DegenerateFactor, InsufficientSample, UnknownColumn

from .aggregate import require_columns

_TERM = re.compile(r"^C\((?P<predictor>[^,]+),.*\)\[T\.(?P<level>.*)\]$")


@dataclass
class RegressionReport:
    """
    Additive OLS fit of a rate on categorical predictors. Each coefficient is
    the expected difference in the response against the predictor's reference
    level, holding the other predictors fixed; the intercept is the expected
    response at the reference level of every predictor.
    """

    sample: pd.DataFrame
    response: str
    predictors: tuple[str, ...]
    reference: dict[str, str]
    terms: pd.DataFrame
    intercept: float
    intercept_std_err: float
    r_squared: float
    adj_r_squared: float
    df_resid: float
    nobs: int
    model: object = field(default=None, repr=False)

    def coefficient(self, predictor: str, level: str) -> float:
        if self.reference.get(predictor) == level:
            return 0.0
        row = self.terms[(self.terms["predictor"] == predictor) & (self.terms["level"] == level)]
        if row.empty:
            raise KeyError(f"No coefficient for {predictor}={level!r}")
        return float(row["coef"].iloc[0])

    def to_frame(self) -> pd.DataFrame:
        """Intercept row followed by one row per non-reference level."""
        head = pd.DataFrame(
            [
                {
                    "predictor": "Intercept",
                    "level": ", ".join(f"{p}={self.reference[p]}" for p in self.predictors),
                    "coef": self.intercept,
                    "std_err": self.intercept_std_err,
                    "t": float(self.model.tvalues["Intercept"]) if self.model is not None else np.nan,
                    "p_value": float(self.model.pvalues["Intercept"]) if self.model is not None else np.nan,
                }
            ]
        )
        return pd.concat([head, self.terms], ignore_index=True)

    def fit_stats(self) -> dict:
        return {
            "r_squared": self.r_squared,
            "adj_r_squared": self.adj_r_squared,
            "df_resid": self.df_resid,
            "nobs": self.nobs,
        }

    def summary_text(self) -> str:
        return self.model.summary().as_text() if self.model is not None else ""


def filter_levels(df: pd.DataFrame, allow: Mapping[str, Iterable[str]]) -> pd.DataFrame:
    """Keep rows whose value for each listed predictor is in its allow-list."""
    require_columns(df, allow.keys())
    d = df.copy()
    for col, levels in allow.items():
        d = d[d[col].isin(list(levels))]
    return d


def reference_levels(
    df: pd.DataFrame,
    predictors: Sequence[str],
    reference: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Reference (omitted) level per predictor: the caller's choice when given,
    otherwise the first level in sorted order.
    """
    reference = dict(reference or {})
    for p in reference:
        if p not in predictors:
            raise UnknownColumn(p, predictors)
    out = {}
    for p in predictors:
        levels = sorted(df[p].dropna().astype(str).unique())
        if p in reference:
            ref = str(reference[p])
            if ref not in levels:
                raise ValueError(f"Reference level {ref!r} for {p} not in sample levels {levels}")
            out[p] = ref
        elif levels:
            out[p] = levels[0]
    return out


def _design(sample: pd.DataFrame, predictors: Sequence[str], reference: Mapping[str, str]):
    # Treatment coding, matching the formula below
    cols = [np.ones(len(sample))]
    labels = [(None, None)]
    for p in predictors:
        for level in sorted(sample[p].unique()):
            if level == reference[p]:
                continue
            cols.append((sample[p] == level).to_numpy(dtype=float))
            labels.append((p, level))
    return np.column_stack(cols), labels


def check_identifiable(sample: pd.DataFrame, predictors: Sequence[str], reference: Mapping[str, str]) -> int:
    """
    Raise InsufficientSample or DegenerateFactor when the additive model cannot
    be estimated from `sample`; otherwise return the number of coefficients.
    """
    levels = {p: sorted(sample[p].unique()) for p in predictors}
    n_params = 1 + sum(max(len(v) - 1, 0) for v in levels.values())
    if len(sample) < n_params + 1:
        raise InsufficientSample(len(sample), n_params)

    for p, v in levels.items():
        if len(v) < 2:
            raise DegenerateFactor(p, v[0] if v else None, "is the only level left after filtering")

    X, labels = _design(sample, predictors, reference)
    rank = 0
    for i in range(X.shape[1]):
        r = np.linalg.matrix_rank(X[:, : i + 1])
        if r == rank:
            p, level = labels[i]
            raise DegenerateFactor(p, level, "is confounded with other predictor levels")
        rank = r
    return n_params


def fit_rate_model(
    table: pd.DataFrame,
    response: str = "lethal_rate",
    predictors: Sequence[str] = ("victim_race", "region"),
    allow: Mapping[str, Iterable[str]] | None = None,
    reference: Mapping[str, str] | None = None,
) -> RegressionReport:
    """
    Filter `table` to the allowed predictor levels and fit
    response ~ C(p1) + C(p2) + ... by ordinary least squares.
    """
    predictors = tuple(predictors)
    require_columns(table, [response, *predictors])
    d = filter_levels(table, allow or {})
    d = d.dropna(subset=[response, *predictors])[[*predictors, response]].copy()
    for p in predictors:
        d[p] = d[p].astype(str)
    d[response] = pd.to_numeric(d[response], errors="coerce").astype(float)
    d = d.sort_values(list(predictors), kind="mergesort").reset_index(drop=True)

    ref = reference_levels(d, predictors, reference)
    check_identifiable(d, predictors, ref)

    rhs = " + ".join(f"C({p}, Treatment(reference={ref[p]!r}))" for p in predictors)
    model = smf.ols(f"{response} ~ {rhs}", data=d).fit()

    rows = []
    for name in model.params.index:
        m = _TERM.match(name)
        if not m:
            continue
        rows.append(
            {
                "predictor": m.group("predictor"),
                "level": m.group("level"),
                "coef": float(model.params[name]),
                "std_err": float(model.bse[name]),
                "t": float(model.tvalues[name]),
                "p_value": float(model.pvalues[name]),
            }
        )
    terms = pd.DataFrame(rows, columns=["predictor", "level", "coef", "std_err", "t", "p_value"])

    return RegressionReport(
        sample=d,
        response=response,
        predictors=predictors,
        reference=ref,
        terms=terms,
        intercept=float(model.params["Intercept"]),
        intercept_std_err=float(model.bse["Intercept"]),
        r_squared=float(model.rsquared),
        adj_r_squared=float(model.rsquared_adj),
        df_resid=float(model.df_resid),
        nobs=int(model.nobs),
        model=model,
    )
