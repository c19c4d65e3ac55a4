# /lms-backend/lms/services/grade_helpers/percentage.py

from typing import Iterable, Union

from .decimal_parsing import round_half_up

Number = Union[int, float]

# The pass mark is shared by every view; the distribution scales are not.
PASS_THRESHOLD = 5


def percentage(part: Number, whole: Number) -> float:
    """Returns `100 * part / whole`, or 0 when `whole` is 0."""
    if whole == 0:
        return 0.0
    return 100 * part / whole


def rounded_percentage(part: Number, whole: Number, places: int = 1) -> float:
    """The same ratio rounded half-up, as every rate in the API is reported."""
    return round_half_up(percentage(part, whole), places)


def format_percentage(part: Number, whole: Number) -> str:
    """The same ratio rendered with one fractional digit, e.g. "75.0"."""
    return f"{rounded_percentage(part, whole, 1):.1f}"


def count_passing(values: Iterable[float]) -> int:
    return sum(1 for v in values if v >= PASS_THRESHOLD)


def pass_rate(values: list) -> float:
    """Share of grades at or above the pass mark, in percent (1 decimal)."""
    return rounded_percentage(count_passing(values), len(values), 1)
