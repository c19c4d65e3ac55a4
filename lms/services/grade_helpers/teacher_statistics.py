# /lms-backend/lms/services/grade_helpers/teacher_statistics.py

"""
Teacher-scoped grade distribution per (class, subject) pair.

The scope is the teacher's list of teaching assignments. Every pair in the
scope produces exactly one statistics row, even when it has no grades yet,
so the dashboard can show empty classes with zeroed figures.

This view ignores `weight`: `averageGrade` is a simple mean.
"""

from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .decimal_parsing import round_half_up
from .percentage import pass_rate
from .records import records_to_frame, filter_frame, record_field, simple_mean

# Four-tier distribution used by the teacher dashboard, evaluated top-down.
# Independent from the five-tier school report scale in `class_statistics`.
TEACHER_DISTRIBUTION_TIERS = (
    ("excellentCount", 9),
    ("goodCount", 8),
    ("averageCount", 7),
)
TEACHER_LOWEST_TIER = "belowAverageCount"


def bucket_teacher_distribution(values: List[float]) -> Dict[str, int]:
    """Counts every grade into exactly one of the four tiers."""
    counts = {name: 0 for name, _ in TEACHER_DISTRIBUTION_TIERS}
    counts[TEACHER_LOWEST_TIER] = 0
    for value in values:
        for name, floor in TEACHER_DISTRIBUTION_TIERS:
            if value >= floor:
                counts[name] += 1
                break
        else:
            counts[TEACHER_LOWEST_TIER] += 1
    return counts


def group_statistics(assignment: Any, group_df: pd.DataFrame) -> Dict[str, Any]:
    """Builds the statistics row for one (class, subject) pair."""
    values = group_df["value"].tolist()
    row = {
        "classId": record_field(assignment, "class_id"),
        "className": record_field(assignment, "class_name"),
        "classCode": record_field(assignment, "class_code"),
        "subjectId": record_field(assignment, "subject_id"),
        "subjectName": record_field(assignment, "subject_name"),
        "totalStudents": int(group_df["student_id"].nunique()),
        "averageGrade": round_half_up(simple_mean(values)),
    }
    row.update(bucket_teacher_distribution(values))
    row["passRate"] = pass_rate(values)
    return row


def _scope_pairs(assignments: List[Any]) -> Dict[Tuple[Any, Any], Any]:
    """Unique (class_id, subject_id) pairs, first assignment wins."""
    pairs: Dict[Tuple[Any, Any], Any] = {}
    for assignment in assignments:
        key = (record_field(assignment, "class_id"), record_field(assignment, "subject_id"))
        pairs.setdefault(key, assignment)
    return pairs


def compute_teacher_statistics(
    assignments: List[Any],
    records: List[Any],
    academic_year: Optional[str] = None,
    term: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Computes one distribution row per scoped (class, subject) pair plus a summary.

    Args:
        assignments: The scope. Each entry needs `class_id` and `subject_id`;
                     `class_name`, `class_code` and `subject_name` are copied
                     through for display.
        records: Grade records. Records outside the scope pairs or not
                 matching the filters are ignored.
        academic_year, term: Optional filters; None means "all".

    Returns:
        {"perGroup": [...], "summary": {totalClasses, totalSubjects,
         totalStudents, overallAvgGrade, classesWithGrades}}

    The rows come back in scope order; sorting is the caller's business
    (see `sort_group_statistics`).
    """
    pairs = _scope_pairs(assignments)

    df = filter_frame(records_to_frame(records), academic_year=academic_year, term=term)
    in_scope = [
        (class_id, subject_id) in pairs
        for class_id, subject_id in zip(df["class_id"], df["subject_id"])
    ]
    df = df[pd.Series(in_scope, index=df.index, dtype=bool)]

    per_group = []
    classes_with_grades = 0
    for (class_id, subject_id), assignment in pairs.items():
        group_df = df[(df["class_id"] == class_id) & (df["subject_id"] == subject_id)]
        if not group_df.empty:
            classes_with_grades += 1
        per_group.append(group_statistics(assignment, group_df))

    summary = {
        "totalClasses": len({class_id for class_id, _ in pairs}),
        "totalSubjects": len({subject_id for _, subject_id in pairs}),
        "totalStudents": int(df["student_id"].nunique()),
        "overallAvgGrade": round_half_up(simple_mean(df["value"].tolist())),
        "classesWithGrades": classes_with_grades,
    }
    return {"perGroup": per_group, "summary": summary}


SORT_KEYS = {
    "grade": "averageGrade",
    "students": "totalStudents",
}


def sort_group_statistics(groups: List[Dict[str, Any]], sort_by: str = "grade", order: str = "desc") -> List[Dict[str, Any]]:
    """Caller-side ordering of the per-group rows. Returns a new list."""
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key '{sort_by}'. Use one of: {', '.join(SORT_KEYS)}.")
    if order not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort order '{order}'. Use 'asc' or 'desc'.")
    return sorted(groups, key=lambda g: g[SORT_KEYS[sort_by]], reverse=(order == "desc"))
