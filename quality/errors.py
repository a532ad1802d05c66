# quality/errors.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UXError:
    code: str
    title: str
    hint: str


# Reusable messages
MISSING_DATA = UXError(
    code="E-DATA-001",
    title="Required data not found",
    hint="Place the incident CSV in data/raw or pass --incidents with a path or URL.",
)

BAD_CSV = UXError(
    code="E-CSV-001",
    title="Could not parse the incident CSV",
    hint="Open the file to check header/encoding; re-download from NYC Open Data if corrupted.",
)

PIPELINE_FAIL = UXError(
    code="E-PIPE-001",
    title="Pipeline step failed",
    hint="Review console output; earlier tables are still written when only the regression fails.",
)

BAD_DATE = UXError(
    code="E-DATE-001",
    title="Date does not match month/day/year",
    hint="Check the date column format or parse leniently so bad values become empty.",
)

UNKNOWN_COLUMN = UXError(
    code="E-COL-001",
    title="Column not found",
    hint="Check the column name against the normalized incident table.",
)

EMPTY_GROUP = UXError(
    code="E-GRP-001",
    title="Group has no incidents",
    hint="Rates need at least one incident per group; rebuild the grouped table from the incidents.",
)

BAD_FLAG = UXError(
    code="E-FLAG-001",
    title="Fatal flag is not 0/1",
    hint="Normalize the incident table first, or map the flag column to 0/1 (true/false).",
)

SMALL_SAMPLE = UXError(
    code="E-REG-001",
    title="Too few rows for the regression",
    hint="Widen the race allow-list or drop a predictor.",
)

DEGENERATE_FACTOR = UXError(
    code="E-REG-002",
    title="Predictor effect cannot be separated",
    hint="Remove the named level from the allow-list or add rows that cross it with other predictor levels.",
)


class AnalysisError(Exception):
    """Base for failures raised by the incident analysis."""

    ux = PIPELINE_FAIL

    def __str__(self) -> str:
        msg = self.args[0] if self.args else ""
        return f"[{self.ux.code}] {self.ux.title}: {msg}"


class MalformedDate(AnalysisError, ValueError):
    ux = BAD_DATE

    def __init__(self, column: str, value: str):
        self.column = column
        self.value = value
        super().__init__(f"{column}={value!r}")


class UnknownColumn(AnalysisError, KeyError):
    ux = UNKNOWN_COLUMN

    def __init__(self, column: str, available=()):
        self.column = column
        self.available = list(available)
        super().__init__(f"{column!r} (available: {', '.join(map(str, self.available))})")


class InvalidFlag(AnalysisError, ValueError):
    ux = BAD_FLAG

    def __init__(self, column: str, value, n_bad: int = 1):
        self.column = column
        self.value = value
        self.n_bad = n_bad
        super().__init__(f"{column}={value!r} ({n_bad} value(s) not recognised)")


class EmptyGroup(AnalysisError):
    ux = EMPTY_GROUP

    def __init__(self, group: tuple):
        self.group = group
        super().__init__(f"{group}")


class InsufficientSample(AnalysisError):
    ux = SMALL_SAMPLE

    def __init__(self, rows: int, params: int):
        self.rows = rows
        self.params = params
        super().__init__(f"{rows} rows for {params} coefficients (need at least {params + 1})")


class DegenerateFactor(AnalysisError):
    ux = DEGENERATE_FACTOR

    def __init__(self, predictor: str, level=None, reason: str = ""):
        self.predictor = predictor
        self.level = level
        where = predictor if level is None else f"{predictor}={level!r}"
        super().__init__(f"{where} {reason}".strip())
