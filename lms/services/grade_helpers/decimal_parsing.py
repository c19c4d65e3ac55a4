# /lms-backend/lms/services/grade_helpers/decimal_parsing.py

"""
Normalisation helpers shared by every statistics entry point.

Grade values and weights reach the engine in whatever shape the data layer
produced: `Decimal` from a Numeric column, `float` from a JSON payload, or a
string from a CSV import. Every aggregation goes through `to_decimal` and
`parse_weight` so that no caller has to care about the stored representation.
"""

import math
import numbers
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


class GradeValueError(ValueError):
    """Raised when a grade value cannot be interpreted as a finite number."""


def to_decimal(value: Any) -> float:
    """
    Converts a grade value into a float.

    Accepts ints, floats, `Decimal` and numeric strings (surrounding
    whitespace allowed). Anything else is a data-integrity error and raises
    `GradeValueError` instead of being coerced to 0 or silently dropped.
    """
    # bool is an int subclass, but True is not a grade.
    if value is None or isinstance(value, bool):
        raise GradeValueError(f"Grade value {value!r} is not a number.")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise GradeValueError("Grade value is an empty string.")
        try:
            value = Decimal(text)
        except InvalidOperation:
            raise GradeValueError(f"Grade value {value!r} is not a number.")
    elif not isinstance(value, (numbers.Real, Decimal)):
        raise GradeValueError(f"Grade value of type {type(value).__name__} is not supported.")

    try:
        number = float(value)
    except ValueError:
        # Signaling NaN refuses the conversion outright.
        raise GradeValueError(f"Grade value {value!r} is not a number.")

    if not math.isfinite(number):
        raise GradeValueError(f"Grade value {value!r} is not finite.")
    return number


def parse_weight(value: Any) -> float:
    """Returns the record's weight, or 1 when it is missing or unparsable."""
    try:
        return to_decimal(value)
    except GradeValueError:
        return 1.0


def round_half_up(value: float, places: int = 2) -> float:
    """
    Rounds the exact binary value of `value` half-up to `places` decimals.

    Python's `round` resolves exact ties to even (8.125 -> 8.12); fixed-point
    display rounding resolves them upwards (8.125 -> 8.13). The statistics use
    the latter everywhere.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
