import json
from pathlib import Path

import pandas as pd

from cli.build_report import json_safe, main, parse_reference


def _write_source(path: Path):
    cells = {
        ("BRONX", "BLACK"): (10, 2),
        ("BRONX", "WHITE HISPANIC"): (6, 1),
        ("BRONX", "WHITE"): (4, 1),
        ("BROOKLYN", "BLACK"): (12, 3),
        ("BROOKLYN", "WHITE HISPANIC"): (5, 1),
        ("BROOKLYN", "WHITE"): (3, 0),
        ("QUEENS", "BLACK"): (8, 2),
        ("QUEENS", "WHITE HISPANIC"): (7, 2),
        ("QUEENS", "WHITE"): (5, 1),
    }
    rows, key = [], 0
    for (boro, race), (n, fatal) in cells.items():
        for i in range(n):
            key += 1
            rows.append(
                {
                    "INCIDENT_KEY": key,
                    "OCCUR_DATE": "02/30/2015" if key == 1 else f"{(i % 12) + 1:02d}/15/2015",
                    "OCCUR_TIME": "23:10:00",
                    "BORO": boro,
                    "PRECINCT": 40,
                    "VIC_RACE": race,
                    "STATISTICAL_MURDER_FLAG": "true" if i < fatal else "false",
                    "PERP_RACE": "UNKNOWN",
                }
            )
    pd.DataFrame(rows).to_csv(path, index=False)


def test_parse_reference():
    assert parse_reference(["victim_race=WHITE HISPANIC", "region=BRONX"]) == {
        "victim_race": "WHITE HISPANIC",
        "region": "BRONX",
    }


def test_cli_writes_outputs(tmp_path: Path):
    src = tmp_path / "incidents.csv"
    _write_source(src)
    out = tmp_path / "out"
    report = main(["--incidents", str(src), "--out", str(out), "--races", "BLACK", "WHITE HISPANIC", "WHITE"])

    assert report.regression is not None
    for name in ["region_rates.csv", "region_race_proportions.csv", "race_region_rates.csv", "regression_terms.csv"]:
        assert (out / name).exists()
    rates = pd.read_csv(out / "region_rates.csv")
    assert rates["count"].sum() == 60
    stats = json.loads((out / "report_stats.json").read_text())
    assert stats["regression"]["nobs"] == 9
    assert "OLS Regression Results" in (out / "regression_summary.txt").read_text()


def test_cli_reports_regression_failure(tmp_path: Path):
    src = tmp_path / "incidents.csv"
    _write_source(src)
    out = tmp_path / "out"
    report = main(["--incidents", str(src), "--out", str(out), "--races", "WHITE"])
    assert report.regression is None
    stats = json.loads((out / "report_stats.json").read_text())
    assert "E-REG" in stats["regression_error"]
    assert (out / "region_rates.csv").exists()


def test_json_safe_drops_non_finite():
    stats = {"chi2": float("nan"), "regression": {"r_squared": 1.0, "bounds": [0.5, float("inf")]}, "df": 2}
    assert json_safe(stats) == {"chi2": None, "regression": {"r_squared": 1.0, "bounds": [0.5, None]}, "df": 2}
    json.dumps(json_safe(stats), allow_nan=False)
