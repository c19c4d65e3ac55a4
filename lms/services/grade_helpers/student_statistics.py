# /lms-backend/lms/services/grade_helpers/student_statistics.py

"""
Student-scoped grade statistics.

Given every grade one student has, this module computes the figures shown on
the student's grade page:

1. A breakdown per academic year, and inside each year per subject, with the
   simple average, weighted average, count, highest and lowest grade.
2. A rollup per academic year (average, weighted average, count).
3. Two headline numbers that always use the full, unfiltered list: the
   cumulative average and the average of the most recent academic year.

Headline numbers use the "--" sentinel when there is nothing to average.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from .decimal_parsing import round_half_up
from .records import (
    records_to_frame, filter_frame, label_or_missing, record_field,
    simple_mean, weighted_mean,
)

NO_DATA = "--"

Average = Union[float, str]


def _summarize(values: List[float], weights: List[float]) -> Dict[str, Any]:
    """Average, weighted average and count for one non-empty group."""
    return {
        "average": round_half_up(simple_mean(values)),
        "weightedAverage": round_half_up(weighted_mean(values, weights)),
        "count": len(values),
    }


def subject_stats(values: List[float], weights: List[float]) -> Dict[str, Any]:
    """The five per-subject statistics. `highest`/`lowest` stay unrounded."""
    if not values:
        return {"average": 0, "weightedAverage": 0, "count": 0, "highest": 0, "lowest": 0}
    stats = _summarize(values, weights)
    stats["highest"] = max(values)
    stats["lowest"] = min(values)
    return stats


def year_stats(values: List[float], weights: List[float]) -> Dict[str, Any]:
    """The three per-year rollup statistics."""
    if not values:
        return {"average": 0, "weightedAverage": 0, "count": 0}
    return _summarize(values, weights)


def _headline_average(values: List[float]) -> Average:
    if not values:
        return NO_DATA
    return round_half_up(simple_mean(values))


def latest_academic_year(years: List[Any]) -> Optional[str]:
    """
    Picks the most recent academic year by plain string comparison.

    "2024-2025" > "2023-2024" works for well-formed labels; labels in other
    formats are still compared as strings, never parsed as dates.
    """
    labels = sorted({str(y) for y in years if y}, reverse=True)
    return labels[0] if labels else None


def compute_student_statistics(records: List[Any], term: Optional[str] = None) -> Dict[str, Any]:
    """
    Computes the per-year/per-subject breakdown plus the two headline averages.

    Args:
        records: Every grade record of one student. May be empty.
        term: Optional term filter ("1" or "2") for the per-year breakdown.
              The headline averages ignore it.

    Returns:
        {"perYear": {year: {"perSubject": {subject: Stats5}, "rollup": Stats3}},
         "overallAverage": float | "--", "currentYearAverage": float | "--"}

    Raises:
        GradeValueError: if any record carries a non-numeric grade value.
    """
    df = records_to_frame(records)

    overall_average = _headline_average(df["value"].tolist())

    current_year = latest_academic_year(df["academic_year"].tolist())
    if current_year is None:
        current_year_average = NO_DATA
    else:
        current = df[df["academic_year"].astype(str) == current_year]
        current_year_average = _headline_average(current["value"].tolist())

    scoped = filter_frame(df, term=term).copy()
    scoped["year_label"] = scoped["academic_year"].map(label_or_missing)
    scoped["subject_label"] = scoped["subject_name"].map(label_or_missing)

    per_year: Dict[str, Dict[str, Any]] = {}
    # Newest year first, the order the grade page lists them in.
    for year in sorted(scoped["year_label"].unique(), reverse=True):
        year_df = scoped[scoped["year_label"] == year]
        per_subject = {}
        for subject, subject_df in year_df.groupby("subject_label", sort=False):
            per_subject[subject] = subject_stats(subject_df["value"].tolist(), subject_df["weight_value"].tolist())
        per_year[year] = {
            "perSubject": per_subject,
            "rollup": year_stats(year_df["value"].tolist(), year_df["weight_value"].tolist()),
        }

    return {
        "perYear": per_year,
        "overallAverage": overall_average,
        "currentYearAverage": current_year_average,
    }


def _recorded_at_key(record: Any) -> datetime:
    recorded_at = record_field(record, "recorded_at")
    if recorded_at is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if isinstance(recorded_at, str):
        recorded_at = datetime.fromisoformat(recorded_at)
    if recorded_at.tzinfo is None:
        return recorded_at.replace(tzinfo=timezone.utc)
    return recorded_at


def recent_grades(records: List[Any], limit: int = 5) -> List[Any]:
    """Most recently recorded grades first. Records without a timestamp sort last."""
    return sorted(records, key=_recorded_at_key, reverse=True)[:limit]
