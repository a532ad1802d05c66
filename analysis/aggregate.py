# analysis/aggregate.py
from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from config import FRACTION_DECIMALS, PERCENT_DECIMALS, PROPORTION_DECIMALS
from quality.errors import UnknownColumn

GroupKeys = tuple[str, ...]


def group_keys(keys: str | Iterable[str]) -> GroupKeys:
    out = (keys,) if isinstance(keys, str) else tuple(keys)
    if not out:
        raise ValueError("At least one grouping key is required")
    return out


def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    for c in columns:
        if c not in df.columns:
            raise UnknownColumn(c, df.columns)


def group_counts(df: pd.DataFrame, keys: str | Iterable[str]) -> pd.DataFrame:
    """
    One row per key combination present in df, with `count`. Rows with a
    missing key value are left out; output is sorted by the key tuple.
    """
    keys = group_keys(keys)
    require_columns(df, keys)
    ct = (
        df.dropna(subset=list(keys))
        .groupby(list(keys), observed=True)
        .size()
        .reset_index(name="count")
    )
    ct = ct[ct["count"] > 0]
    return ct.sort_values(list(keys), kind="mergesort").reset_index(drop=True)


def group_proportions(df: pd.DataFrame, keys: str | Iterable[str]) -> pd.DataFrame:
    """
    Counts plus `proportion` of each row within its first key (e.g. share of
    each victim race within a borough). With a single key the proportion is
    of the overall total. Values are kept at full precision.
    """
    keys = group_keys(keys)
    ct = group_counts(df, keys)
    if len(keys) == 1:
        totals = ct["count"].sum()
    else:
        totals = ct.groupby(keys[0], observed=True)["count"].transform("sum")
    ct["proportion"] = ct["count"] / totals
    return ct


def round_for_display(df: pd.DataFrame, percent: bool | None = None) -> pd.DataFrame:
    """Round proportion/lethal_rate columns for presentation; returns a copy."""
    out = df.copy()
    if "proportion" in out.columns:
        out["proportion"] = out["proportion"].round(PROPORTION_DECIMALS)
    if "lethal_rate" in out.columns:
        if percent is None:
            percent = bool(out.attrs.get("percent", False))
        out["lethal_rate"] = out["lethal_rate"].round(PERCENT_DECIMALS if percent else FRACTION_DECIMALS)
    return out
