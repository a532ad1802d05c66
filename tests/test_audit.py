import pandas as pd

from audit import column_profile, quick_audit
from quality.checks import incident_expectations


def _toy():
    return pd.DataFrame(
        {
            "incident_key": ["1", "2", "3"],
            "occurred_on": pd.to_datetime(["2006-08-27", "2010-01-01", "2019-12-31"]),
            "region": ["BRONX", "QUEENS", "STATEN ISLAND"],
            "victim_race": ["BLACK", "WHITE", None],
            "is_fatal": [1, 0, 0],
        }
    )


def test_expectations():
    out = incident_expectations(_toy())
    assert out["has_incident_key"]
    assert out["dates_parsed"]
    assert out["fatal_flag_binary"]
    assert out["regions_known"]
    assert not out["victim_race_present"]


def test_column_profile():
    df = pd.concat([_toy(), _toy().iloc[[0]]], ignore_index=True)
    prof = column_profile(df, ["victim_race", "region", "precinct"]).set_index("column")
    assert prof.loc["victim_race", "non_null"] == 3
    assert prof.loc["victim_race", "filled_pct"] == 75.0
    assert prof.loc["victim_race", "top"] == "BLACK"
    assert prof.loc["victim_race", "top_count"] == 2
    assert prof.loc["region", "n_unique"] == 3
    assert not prof.loc["precinct", "present"]
    assert prof.loc["precinct", "filled_pct"] == 0.0
    assert prof.loc["precinct", "top"] is None


def test_quick_audit_prints(capsys):
    checks = quick_audit("incidents", _toy(), key_cols=["region", "victim_race"])
    out = capsys.readouterr().out
    assert "=== AUDIT: incidents ===" in out
    assert "victim_race_present" in out
    assert set(checks) >= {"dates_parsed", "regions_known"}
