import pandas as pd

from analysis.aggregate import group_proportions
from analysis.fatality import lethal_rates
from charts import race_region_rate_chart, region_race_chart, region_rate_chart


def _toy():
    return pd.DataFrame(
        {
            "region": ["BRONX", "BRONX", "QUEENS", "QUEENS"],
            "victim_race": ["BLACK", "WHITE", "BLACK", "BLACK"],
            "is_fatal": [1, 0, 0, 1],
        }
    )


def _values(chart):
    spec = chart.to_dict()
    return next(iter(spec["datasets"].values())), spec


def test_region_rate_chart():
    values, spec = _values(region_rate_chart(lethal_rates(_toy(), "region")))
    assert spec["encoding"]["y"]["field"] == "lethal_rate"
    assert {v["region"] for v in values} == {"BRONX", "QUEENS"}


def test_region_race_chart():
    values, spec = _values(region_race_chart(group_proportions(_toy(), ["region", "victim_race"])))
    assert spec["encoding"]["color"]["field"] == "victim_race"
    assert len(values) == 3


def test_race_region_chart_uses_percent():
    values, _ = _values(race_region_rate_chart(lethal_rates(_toy(), ["victim_race", "region"], percent=True)))
    by_key = {(v["victim_race"], v["region"]): v["lethal_rate"] for v in values}
    assert by_key[("BLACK", "QUEENS")] == 50.0
