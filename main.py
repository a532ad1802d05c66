# main.py
from __future__ import annotations

import logging

from analysis.aggregate import round_for_display
from analysis.pipeline import build_report
from audit import quick_audit
from config import DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS
from loaders import read_incidents
from normalize import normalize_incidents


def existing(cols: list[str], df) -> list[str]:
    """Filter a list of column names to those present in df."""
    return [c for c in cols if c in df.columns]


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # -------------------------
    # Load + normalize
    # -------------------------
    raw = read_incidents()
    incidents = normalize_incidents(raw, DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS)

    quick_audit(
        "incidents",
        incidents,
        key_cols=existing(["incident_key", "occurred_on", "region", "victim_race", "is_fatal"], incidents),
    )

    # -------------------------
    # Data products
    # -------------------------
    report = build_report(incidents)

    print("\nIncidents per 1,000 residents by borough:")
    if report.per_capita is not None:
        print(report.per_capita.round({"per_capita": 2}).to_string(index=False))
    else:
        print(f"not computed: {report.per_capita_error}")

    print("\nLethal rate by borough:")
    print(round_for_display(report.region_rates).to_string(index=False))

    print("\nVictim race within each borough:")
    print(round_for_display(report.region_race).to_string(index=False))

    print("\nLethal rate (%) by victim race and borough:")
    print(round_for_display(report.race_region_rates).to_string(index=False))

    ind = report.independence or {}
    if ind.get("chi2") is not None:
        print(f"\nBorough x fatal chi-square: chi2={ind['chi2']:0.2f}, df={ind['df']}, p={ind['p_value']:0.4g}")

    # -------------------------
    # Regression
    # -------------------------
    if report.regression is None:
        print(f"\nRegression not run: {report.regression_error}")
        return
    reg = report.regression
    print("\nReference levels: " + ", ".join(f"{k}={v}" for k, v in reg.reference.items()))
    print(reg.to_frame().round(4).to_string(index=False))
    print(f"R^2={reg.r_squared:0.3f} | adj R^2={reg.adj_r_squared:0.3f} | df_resid={reg.df_resid:0.0f} | n={reg.nobs}")


if __name__ == "__main__":
    main()
