import logging
from collections.abc import Iterable

import pandas as pd

from config import DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS, FATAL_COLUMN
from quality.errors import InvalidFlag, MalformedDate

log = logging.getLogger(__name__)

_FATAL_TRUE = {"TRUE", "T", "Y", "YES", "1", "1.0"}
_FATAL_FALSE = {"FALSE", "F", "N", "NO", "0", "0.0"}


def parse_incident_dates(
    s: pd.Series, fmt: str = DATE_FORMAT, strict: bool = False, column: str = DATE_COLUMN
) -> pd.Series:
    """
    Parse month/day/year strings. Unparseable values become NaT (and are logged)
    unless strict, in which case the first one raises MalformedDate.
    """
    s = s.astype("string").str.strip()
    out = pd.to_datetime(s, format=fmt, errors="coerce")
    bad = (out.isna() & s.notna() & s.ne("")).fillna(False).astype(bool)
    if bad.any():
        first = str(s[bad].iloc[0])
        if strict:
            raise MalformedDate(column, first)
        log.warning(
            "%s: %d value(s) did not match %s and were set to NaT (e.g. %r)",
            column,
            int(bad.sum()),
            fmt,
            first,
        )
    return out


def drop_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    # Names not in the frame are ignored
    drop = set(columns)
    keep = [c for c in df.columns if c not in drop]
    return df[keep].copy()


def coerce_fatal_flag(s: pd.Series, strict: bool = False, column: str = FATAL_COLUMN) -> pd.Series:
    """
    Map true/false, Y/N, 1/0 (text, bool or numeric) to int 0/1; missing values are 0.
    Other values are logged and treated as 0, or raise InvalidFlag when strict.
    """
    out = pd.Series(pd.NA, index=s.index, dtype="Int64")
    if pd.api.types.is_numeric_dtype(s):
        num = pd.to_numeric(s, errors="coerce").astype("Float64")
        out[num.eq(1).fillna(False).astype(bool)] = 1
        out[num.eq(0).fillna(False).astype(bool)] = 0
        present = num.notna().astype(bool)
    else:
        text = s.astype("string").str.upper().str.strip()
        out[text.isin(_FATAL_TRUE)] = 1
        out[text.isin(_FATAL_FALSE)] = 0
        present = text.notna().astype(bool)
    unknown = out.isna().astype(bool) & present
    if unknown.any():
        if strict:
            raise InvalidFlag(column, s[unknown].iloc[0], int(unknown.sum()))
        log.warning("%s: %d value(s) not recognised, treated as 0", column, int(unknown.sum()))
    return out.fillna(0).astype(int)


def normalize_incidents(
    raw: pd.DataFrame,
    date_column: str = DATE_COLUMN,
    date_format: str = DATE_FORMAT,
    exclude: Iterable[str] = DROP_COLUMNS,
    strict_dates: bool = False,
) -> pd.DataFrame:
    """Return a cleaned copy of the raw incident table; the raw table is not modified."""
    df = drop_columns(raw, exclude)
    if date_column in df.columns:
        df[date_column] = parse_incident_dates(df[date_column], date_format, strict=strict_dates, column=date_column)
    if FATAL_COLUMN in df.columns:
        df[FATAL_COLUMN] = coerce_fatal_flag(df[FATAL_COLUMN])
    for col in df.select_dtypes(include="string").columns:
        df[col] = df[col].str.strip().str.upper()
    return df
