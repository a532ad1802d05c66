# charts.py
from __future__ import annotations

import altair as alt
import pandas as pd

from analysis.aggregate import round_for_display


def region_rate_chart(region_rates: pd.DataFrame) -> alt.Chart:
    data = round_for_display(region_rates)
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("region:N", sort="-y", title="Borough"),
            y=alt.Y("lethal_rate:Q", title="Fatal share of incidents"),
            tooltip=["region", "count", "lethal_count", "lethal_rate"],
        )
        .properties(title="Lethal rate by borough", height=360)
    )


def region_race_chart(region_race: pd.DataFrame) -> alt.Chart:
    data = round_for_display(region_race)
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("region:N", title="Borough"),
            y=alt.Y("proportion:Q", stack="normalize", title="Share of victims"),
            color=alt.Color("victim_race:N", title="Victim race"),
            tooltip=["region", "victim_race", "count", "proportion"],
        )
        .properties(title="Victim race within each borough", height=360)
    )


def race_region_rate_chart(race_region_rates: pd.DataFrame) -> alt.Chart:
    data = round_for_display(race_region_rates, percent=True)
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("victim_race:N", title="Victim race"),
            xOffset="region:N",
            y=alt.Y("lethal_rate:Q", title="Fatal incidents (%)"),
            color=alt.Color("region:N", title="Borough"),
            tooltip=["victim_race", "region", "count", "lethal_count", "lethal_rate"],
        )
        .properties(title="Lethal rate by victim race and borough", height=360)
    )
