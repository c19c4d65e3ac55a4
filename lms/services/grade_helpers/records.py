# /lms-backend/lms/services/grade_helpers/records.py

"""
Turns grade records into a normalised pandas DataFrame.

A record may be a plain dict (as produced by the repository), a pydantic
model or an ORM row; fields are read by name either way. The resulting frame
always carries two extra numeric columns, `value` and `weight_value`, which
are the only columns the statistics do arithmetic on.
"""

import functools
import operator
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

import pandas as pd

from .decimal_parsing import to_decimal, parse_weight

GRADE_RECORD_FIELDS = [
    "id", "student_id", "class_id", "class_name", "class_code", "subject_id", "subject_name",
    "grade_value", "grade_type", "weight", "term", "academic_year", "recorded_at",
]

MISSING_LABEL = "N/A"


def record_field(record: Any, name: str, default: Any = None) -> Any:
    """Reads one field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def label_or_missing(value: Any) -> str:
    """Grouping label for a year or subject; blanks collapse to "N/A"."""
    return str(value) if value else MISSING_LABEL


def records_to_frame(records: Iterable[Any]) -> pd.DataFrame:
    """
    Builds the DataFrame every statistics function works from.

    Raises `GradeValueError` on the first record whose grade value is not a
    number. Missing or malformed weights become 1.
    """
    rows = [{name: record_field(r, name) for name in GRADE_RECORD_FIELDS} for r in records]
    # object dtype keeps the raw values; pandas would otherwise turn None into NaN.
    df = pd.DataFrame(rows, columns=GRADE_RECORD_FIELDS, dtype=object)
    df["value"] = pd.Series([to_decimal(v) for v in df["grade_value"]], index=df.index, dtype="float64")
    df["weight_value"] = pd.Series([parse_weight(w) for w in df["weight"]], index=df.index, dtype="float64")
    return df


def filter_frame(df: pd.DataFrame, academic_year: Optional[str] = None, term: Optional[str] = None) -> pd.DataFrame:
    """Applies the optional year/term scope filters. None means "all"."""
    if academic_year:
        df = df[df["academic_year"].astype(str) == str(academic_year)]
    if term:
        df = df[df["term"].astype(str) == str(term)]
    return df


def running_total(values: List[float]) -> float:
    # Plain left-to-right accumulation; sum() compensates on Python 3.12+.
    return functools.reduce(operator.add, values, 0.0)


def simple_mean(values: List[float]) -> float:
    """Mean of `values`, or 0 for an empty list."""
    if not values:
        return 0.0
    return running_total(values) / len(values)


def weighted_mean(values: List[float], weights: List[float]) -> float:
    """
    Sum of value x weight over the sum of weights. Falls back to the simple
    mean when every weight is zero, and to 0 for an empty list.
    """
    total_weight = running_total(weights)
    if total_weight == 0:
        return simple_mean(values)
    return running_total([v * w for v, w in zip(values, weights)]) / total_weight
