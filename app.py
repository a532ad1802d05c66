# app.py
from __future__ import annotations
import sys
from pathlib import Path
import pandas as pd
import streamlit as st

st.set_page_config(page_title="NYC Shooting Incidents: Fatality Report", layout="wide")

# --- Project paths / imports
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from analysis.aggregate import round_for_display
from analysis.pipeline import build_report
from charts import race_region_rate_chart, region_race_chart, region_rate_chart
from config import DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS, RACE_COLUMN, REGION_COLUMN, REGRESSION_RACES
from loaders import DataLoadError, read_incidents
from normalize import normalize_incidents
from quality.errors import MISSING_DATA


@st.cache_data(show_spinner="Loading incidents…")
def load_data() -> pd.DataFrame:
    raw = read_incidents()
    return normalize_incidents(raw, DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS)


try:
    incidents = load_data()
except DataLoadError as e:
    st.error(f"[{MISSING_DATA.code}] {MISSING_DATA.title}: {e}\n\n{MISSING_DATA.hint}")
    st.stop()

# ----------------------------------------
# Sidebar controls
with st.sidebar:
    st.header("Regression inputs")
    races = sorted(incidents[RACE_COLUMN].dropna().unique().tolist())
    race_sel = st.multiselect(
        "Victim races in the model", races, default=[r for r in REGRESSION_RACES if r in races]
    )
    race_ref = st.selectbox("Reference race", sorted(race_sel) or ["(none)"])
    regions = sorted(incidents[REGION_COLUMN].dropna().unique().tolist())
    region_ref = st.selectbox("Reference borough", regions or ["(none)"])

reference = {}
if race_sel:
    reference[RACE_COLUMN] = race_ref
if regions:
    reference[REGION_COLUMN] = region_ref

report = build_report(incidents, races=race_sel, reference=reference)

# -------------------------------
# Top banner
st.title("NYC Shooting Incidents: Fatality Report")
st.caption(f"Loaded incidents: {len(incidents):,} | boroughs: {len(regions)} | victim races: {len(races)}")

tab1, tab2, tab3, tab4 = st.tabs(["By borough", "Race within borough", "Rate by race", "Regression"])

with tab1:
    c1, c2 = st.columns(2)
    with c1:
        st.metric("Incidents", f"{int(report.region_rates['count'].sum()):,}")
    with c2:
        st.metric("Fatal", f"{int(report.region_rates['lethal_count'].sum()):,}")
    st.altair_chart(region_rate_chart(report.region_rates), use_container_width=True)
    shown = round_for_display(report.region_rates)
    if report.per_capita is not None:
        shown = shown.merge(report.per_capita[[REGION_COLUMN, "population", "per_capita"]], on=REGION_COLUMN)
        shown["per_capita"] = shown["per_capita"].round(2)
    elif report.per_capita_error is not None:
        st.warning(f"Per-capita rates not computed: {report.per_capita_error}")
    st.dataframe(shown, use_container_width=True)
    ind = report.independence or {}
    if ind.get("chi2") is None:
        st.warning("Chi-square not computed: a borough or outcome has no incidents.")
    else:
        st.markdown("**Chi-square test (borough × fatal)**")
        st.write({"chi2": round(ind["chi2"], 3), "df": ind["df"], "p_value": f'{ind["p_value"]:.4g}'})

with tab2:
    st.altair_chart(region_race_chart(report.region_race), use_container_width=True)
    st.dataframe(round_for_display(report.region_race), use_container_width=True)

with tab3:
    st.altair_chart(race_region_rate_chart(report.race_region_rates), use_container_width=True)
    rr = round_for_display(report.race_region_rates)
    st.dataframe(rr, use_container_width=True)
    st.download_button(
        "Download race × borough rates (CSV)",
        data=rr.to_csv(index=False).encode("utf-8"),
        file_name="race_region_rates.csv",
        mime="text/csv",
    )

with tab4:
    st.subheader("lethal_rate (%) ~ victim race + borough")
    if report.regression is None:
        st.error(str(report.regression_error))
        ux = getattr(report.regression_error, "ux", None)
        if ux is not None:
            st.info(ux.hint)
    else:
        reg = report.regression
        st.caption("Reference levels: " + ", ".join(f"{k}={v}" for k, v in reg.reference.items()))
        st.dataframe(reg.to_frame().round(4), use_container_width=True)
        st.write({k: (round(v, 4) if isinstance(v, float) else v) for k, v in reg.fit_stats().items()})
        st.expander("Model summary").text(reg.summary_text())
