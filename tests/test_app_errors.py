import pytest

from quality.errors import (
    BAD_CSV,
    MISSING_DATA,
    PIPELINE_FAIL,
    AnalysisError,
    DegenerateFactor,
    EmptyGroup,
    InsufficientSample,
    InvalidFlag,
    MalformedDate,
    UnknownColumn,
)


def test_ux_error_constants_import():
    assert MISSING_DATA.code.startswith("E-")
    assert BAD_CSV.hint
    assert PIPELINE_FAIL.title


@pytest.mark.parametrize(
    "err, needle",
    [
        (MalformedDate("occurred_on", "13/45/2020"), "13/45/2020"),
        (UnknownColumn("precinct", ["region", "victim_race"]), "precinct"),
        (EmptyGroup(("BRONX", "WHITE")), "BRONX"),
        (InvalidFlag("is_fatal", "maybe", 3), "3 value(s)"),
        (InsufficientSample(3, 4), "need at least 5"),
        (DegenerateFactor("victim_race", "ASIAN", "is confounded"), "victim_race='ASIAN'"),
    ],
)
def test_errors_name_the_offender(err, needle):
    assert isinstance(err, AnalysisError)
    msg = str(err)
    assert needle in msg
    assert msg.startswith(f"[{err.ux.code}]")


def test_unknown_column_is_a_key_error():
    with pytest.raises(KeyError):
        raise UnknownColumn("precinct")
