import pandas as pd
import pytest

from analysis.aggregate import group_counts, group_keys, group_proportions, round_for_display
from quality.errors import UnknownColumn


def _rows(counts):
    rows = []
    for (region, race), n in counts.items():
        rows += [{"region": region, "victim_race": race}] * n
    return pd.DataFrame(rows)


def _toy():
    # counts: (R1,A)=3, (R1,B)=1, (R2,A)=2, (R2,B)=2
    return _rows({("R2", "B"): 2, ("R1", "A"): 3, ("R2", "A"): 2, ("R1", "B"): 1})


def test_group_keys_tuple():
    assert group_keys("region") == ("region",)
    assert group_keys(["region", "victim_race"]) == ("region", "victim_race")
    with pytest.raises(ValueError):
        group_keys([])


def test_counts_sorted_by_key():
    ct = group_counts(_toy(), ["region", "victim_race"])
    assert list(ct.itertuples(index=False, name=None)) == [
        ("R1", "A", 3),
        ("R1", "B", 1),
        ("R2", "A", 2),
        ("R2", "B", 2),
    ]
    assert (ct["count"] > 0).all()


def test_proportions_within_first_key():
    ct = group_proportions(_toy(), ["region", "victim_race"]).set_index(["region", "victim_race"])
    assert ct.loc[("R1", "A"), "proportion"] == pytest.approx(0.75)
    assert ct.loc[("R1", "B"), "proportion"] == pytest.approx(0.25)
    assert ct.loc[("R2", "A"), "proportion"] == pytest.approx(0.5)
    assert ct.loc[("R2", "B"), "proportion"] == pytest.approx(0.5)


def test_proportions_sum_to_one_per_parent():
    df = _rows({("R1", "A"): 7, ("R1", "B"): 5, ("R1", "C"): 1, ("R2", "A"): 11, ("R2", "C"): 3, ("R3", "B"): 1})
    shown = round_for_display(group_proportions(df, ["region", "victim_race"]))
    sums = shown.groupby("region")["proportion"].sum()
    assert ((sums - 1.0).abs() <= 0.01).all()


def test_single_key_proportion_is_global():
    ct = group_proportions(_toy(), "region")
    assert ct["proportion"].tolist() == pytest.approx([0.5, 0.5])


def test_single_row_group():
    df = _rows({("R1", "A"): 1, ("R2", "A"): 4, ("R2", "B"): 1})
    ct = group_proportions(df, ["region", "victim_race"]).set_index(["region", "victim_race"])
    assert ct.loc[("R1", "A"), "proportion"] == 1.0


def test_missing_keys_are_excluded():
    df = _toy()
    df.loc[0, "victim_race"] = None
    ct = group_counts(df, ["region", "victim_race"])
    assert ct["count"].sum() == len(df) - 1


def test_unknown_grouping_key():
    with pytest.raises(UnknownColumn) as exc:
        group_counts(_toy(), ["region", "precinct"])
    assert exc.value.column == "precinct"


def test_full_precision_until_display():
    df = _rows({("R1", "A"): 1, ("R1", "B"): 2})
    ct = group_proportions(df, ["region", "victim_race"])
    assert ct["proportion"].iloc[0] == pytest.approx(1 / 3, abs=1e-12)
    assert round_for_display(ct)["proportion"].iloc[0] == 0.33
    # input left alone
    assert ct["proportion"].iloc[0] != 0.33
