# quality/checks.py
import pandas as pd

from config import REGIONS


def incident_expectations(df: pd.DataFrame) -> dict:
    out = {}
    out["has_incident_key"] = "incident_key" in df.columns and df["incident_key"].notna().all()
    out["dates_parsed"] = "occurred_on" in df and df["occurred_on"].notna().mean() > 0.95
    out["fatal_flag_binary"] = "is_fatal" in df and df["is_fatal"].isin([0, 1]).all()
    out["regions_known"] = "region" in df and df["region"].dropna().isin(REGIONS).all()
    out["victim_race_present"] = "victim_race" in df and df["victim_race"].notna().mean() > 0.9
    return out
