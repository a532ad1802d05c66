# loaders.py
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from config import COLUMN_ALIASES, INCIDENTS_CSV, INCIDENTS_URL

log = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when an input file is missing, empty, or unreadable."""


def _is_url(source) -> bool:
    return isinstance(source, str) and source.split("://", 1)[0] in {"http", "https"}


def read_csv_safe(path: str | Path, **kwargs) -> pd.DataFrame:
    """
    Read a CSV with strict error handling and clear messages.
    Defaults to dtype=string and low_memory=False; caller can override via **kwargs.
    Accepts a local path or an http(s) URL. Validates that the file contains usable data.
    """
    p = path if _is_url(path) else Path(path)
    try:
        df = pd.read_csv(
            p,
            dtype=kwargs.pop("dtype", "string"),
            low_memory=kwargs.pop("low_memory", False),
            on_bad_lines=kwargs.pop("on_bad_lines", "error"),
            **kwargs,
        )
        # Treat 0 rows/cols or all-NA as unusable.
        if df.shape[0] == 0 or df.shape[1] == 0 or df.isna().all().all():
            msg = f"CSV appears empty or contains no usable data: {p}"
            log.error(msg)
            raise DataLoadError(msg)
        return df

    except FileNotFoundError as e:
        msg = f"Missing input file: {p}\nPut the incident CSV in data/raw or pass its URL."
        log.error(msg)
        raise DataLoadError(msg) from e
    except pd.errors.EmptyDataError as e:
        msg = f"Empty or corrupt CSV: {p}"
        log.error(msg)
        raise DataLoadError(msg) from e
    except pd.errors.ParserError as e:
        msg = f"Could not parse CSV: {p}\nPandas error: {e}"
        log.error(msg)
        raise DataLoadError(msg) from e
    except DataLoadError:
        raise
    except Exception as e:
        msg = f"Unexpected error reading {p}: {type(e).__name__}: {e}"
        log.error(msg)
        raise DataLoadError(msg) from e


def read_incidents(source: str | Path | None = None) -> pd.DataFrame:
    """
    Load the raw incident table and rename the analysed columns to their
    canonical names. Falls back to the public download when no local copy exists.
    """
    if source is None:
        source = INCIDENTS_CSV if Path(INCIDENTS_CSV).exists() else INCIDENTS_URL
    log.info("Reading incidents from %s", source)
    df = read_csv_safe(source)

    for col in df.select_dtypes(include="string").columns:
        df[col] = df[col].str.strip()

    return df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if k in df.columns})
