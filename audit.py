# audit.py
from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from quality.checks import incident_expectations


def column_profile(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """
    One row per key column: non-null count, share filled (percent, 1 d.p.),
    distinct values and the most frequent value. Absent columns report zeros.
    """
    rows, n = [], len(df)
    for c in cols:
        s = df[c] if c in df.columns else pd.Series(dtype=object)
        filled = int(s.notna().sum())
        counts = s.value_counts(dropna=True)
        rows.append(
            {
                "column": c,
                "present": c in df.columns,
                "non_null": filled,
                "filled_pct": round(100 * filled / n, 1) if n else 0.0,
                "n_unique": len(counts),
                "top": counts.index[0] if len(counts) else None,
                "top_count": int(counts.iloc[0]) if len(counts) else 0,
            }
        )
    return pd.DataFrame(rows)

def quick_audit(name: str, df: pd.DataFrame, key_cols: Iterable[str] | None = None, show: bool = True) -> dict:
    """
    Print a concise audit summary for an incident table and return its expectation checks.
    """
    checks = incident_expectations(df)
    if not show:
        return checks
    print(f"\n=== AUDIT: {name} ===")
    print(f"rows: {len(df):,} | cols: {len(df.columns)}")
    if key_cols:
        key_cols = list(key_cols)
        print("key columns:")
        print(column_profile(df, key_cols).to_string(index=False))
    failed = [k for k, ok in checks.items() if not ok]
    print("expectations: " + ("all passed" if not failed else "FAILED " + ", ".join(failed)))
    return checks
