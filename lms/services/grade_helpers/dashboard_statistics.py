# /lms-backend/lms/services/grade_helpers/dashboard_statistics.py

"""
Grade statistics for the administrative dashboard.

Three views live here:
1. `compute_school_grade_stats`: school-wide figures broken down by grade
   type, by term and by class.
2. `compute_class_grade_stats`: one class, one row per student with
   weighted averages per grade type.
3. `compute_subject_term_averages`: one student's weighted average per
   (subject, term), shown next to their paginated grade list.

All averages here are weighted (value x weight over total weight) and fall
back to the plain mean when the weights sum to zero. The dashboard's
four-tier distribution is its own scale and is unrelated to the teacher
dashboard and the class report.
"""

from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .decimal_parsing import round_half_up
from .records import (
    records_to_frame, filter_frame, label_or_missing, running_total,
    simple_mean, weighted_mean,
)

GRADE_TYPES = ("homework", "quiz", "midterm", "final", "assignment", "participation")
TERMS = ("1", "2", "final")

# Four-tier dashboard scale, evaluated top-down.
DASHBOARD_DISTRIBUTION_TIERS = (
    ("excellent", 9),
    ("good", 7),
    ("average", 5),
)
DASHBOARD_LOWEST_TIER = "below"


def bucket_dashboard_distribution(values: List[float]) -> Dict[str, int]:
    counts = {name: 0 for name, _ in DASHBOARD_DISTRIBUTION_TIERS}
    counts[DASHBOARD_LOWEST_TIER] = 0
    for value in values:
        for name, floor in DASHBOARD_DISTRIBUTION_TIERS:
            if value >= floor:
                counts[name] += 1
                break
        else:
            counts[DASHBOARD_LOWEST_TIER] += 1
    return counts


def _term_label(term: Any) -> str:
    # Grades recorded without a term count towards the end-of-year figure.
    return str(term) if term else "final"


def _type_stats(df: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    by_type = {}
    for grade_type in GRADE_TYPES:
        type_df = df[df["grade_type"].astype(str) == grade_type]
        values = type_df["value"].tolist()
        if not values:
            by_type[grade_type] = {"count": 0, "average": 0, "min": 0, "max": 0}
            continue
        by_type[grade_type] = {
            "count": len(values),
            "average": round_half_up(weighted_mean(values, type_df["weight_value"].tolist())),
            "min": min(values),
            "max": max(values),
        }
    return by_type


def _positive_mean(averages: List[float]) -> float:
    positive = [a for a in averages if a > 0]
    if not positive:
        return 0.0
    return round_half_up(simple_mean(positive))


def _term_stats(df: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """
    Each term's average is the mean of its per-class weighted averages,
    counting only classes whose average is above zero. When no grade carries
    the "final" term, the final figure is derived from terms 1 and 2.
    """
    by_term = {}
    for term in TERMS:
        term_df = df[df["term_label"] == term]
        class_averages = [
            weighted_mean(class_df["value"].tolist(), class_df["weight_value"].tolist())
            for _, class_df in term_df.groupby("class_id", sort=False, dropna=False)
        ]
        average = _positive_mean(class_averages)
        by_term[term] = {"count": len(term_df) if average > 0 else 0, "average": average}

    first, second, final = by_term["1"], by_term["2"], by_term["final"]
    if final["average"] == 0:
        if first["average"] > 0 and second["average"] > 0:
            final["average"] = round_half_up((first["average"] + second["average"]) / 2)
            final["count"] = first["count"] + second["count"]
        elif first["average"] > 0:
            final.update(first)
        elif second["average"] > 0:
            final.update(second)
    return by_term


def _class_stats(df: pd.DataFrame) -> List[Dict[str, Any]]:
    rows = []
    for class_id, class_df in df.groupby("class_id", sort=False, dropna=False):
        first = class_df.iloc[0]
        rows.append({
            "classId": class_id if pd.notna(class_id) else None,
            "className": first["class_name"],
            "classCode": first["class_code"],
            "count": len(class_df),
            "average": round_half_up(weighted_mean(class_df["value"].tolist(), class_df["weight_value"].tolist())),
        })
    return sorted(rows, key=lambda row: row["average"], reverse=True)


def compute_school_grade_stats(
    records: List[Any],
    academic_year: Optional[str] = None,
    term: Optional[str] = None,
) -> Dict[str, Any]:
    """
    School-wide grade statistics.

    Returns:
        {"overall": {"totalGrades", "average"},
         "byType": {grade_type: {"count", "average", "min", "max"}},
         "byTerm": {term: {"count", "average"}},
         "byClass": [{"classId", "className", "classCode", "count", "average"}]}

    `overall.average` is the mean of the class averages that are above zero,
    so a large class does not outweigh a small one.
    """
    df = filter_frame(records_to_frame(records), academic_year=academic_year, term=term).copy()
    df["term_label"] = df["term"].map(_term_label)

    by_class = _class_stats(df)
    return {
        "overall": {
            "totalGrades": len(df),
            "average": _positive_mean([row["average"] for row in by_class]),
        },
        "byType": _type_stats(df),
        "byTerm": _term_stats(df),
        "byClass": by_class,
    }


def _student_averages(student_df: pd.DataFrame) -> Dict[str, float]:
    """
    Weighted average per grade type, plus an overall figure that weighs every
    type by its total weight. A type whose weights sum to zero contributes its
    plain mean once per grade.
    """
    averages = {grade_type: 0 for grade_type in GRADE_TYPES}
    weighted_total, total_weight = [], []
    for grade_type in GRADE_TYPES:
        type_df = student_df[student_df["grade_type"].astype(str) == grade_type]
        values = type_df["value"].tolist()
        if not values:
            continue
        weights = type_df["weight_value"].tolist()
        type_weight = running_total(weights)
        if type_weight > 0:
            type_total = running_total([v * w for v, w in zip(values, weights)])
            averages[grade_type] = round_half_up(type_total / type_weight)
            weighted_total.append(type_total)
            total_weight.append(type_weight)
        else:
            average = simple_mean(values)
            averages[grade_type] = round_half_up(average)
            weighted_total.append(average * len(values))
            total_weight.append(float(len(values)))

    weight_sum = running_total(total_weight)
    averages["overall"] = round_half_up(running_total(weighted_total) / weight_sum) if weight_sum > 0 else 0
    return averages


def compute_class_grade_stats(records: List[Any], students: Mapping[int, Any]) -> Dict[str, Any]:
    """
    Per-student statistics for one class.

    Args:
        records: The class's grades, already narrowed by the caller.
        students: Student id -> user row, for names and codes.

    Returns:
        {"overall": {"totalGrades", "totalStudents", "average", "min", "max"},
         "distribution": {"excellent", "good", "average", "below"},
         "studentStats": [...]} with students sorted by overall average,
        highest first.
    """
    df = records_to_frame(records)
    values = df["value"].tolist()

    student_stats = []
    for student_id, student_df in df.groupby("student_id", sort=False, dropna=False):
        student = students.get(student_id)
        student_stats.append({
            "studentId": student_id,
            "studentName": getattr(student, "name", None),
            "studentCode": getattr(student, "code", None),
            "gradeCount": len(student_df),
            "averages": _student_averages(student_df),
        })
    student_stats.sort(key=lambda row: row["averages"]["overall"], reverse=True)

    return {
        "overall": {
            "totalGrades": len(values),
            "totalStudents": len(student_stats),
            "average": round_half_up(weighted_mean(values, df["weight_value"].tolist())),
            "min": min(values) if values else 0,
            "max": max(values) if values else 0,
        },
        "distribution": bucket_dashboard_distribution(values),
        "studentStats": student_stats,
    }


def compute_subject_term_averages(records: List[Any]) -> List[Dict[str, Any]]:
    """Weighted average and grade count per (subject, term), in first-seen order."""
    df = records_to_frame(records)
    if df.empty:
        return []

    averages = []
    for (subject_id, term), group in df.groupby(["subject_id", "term"], sort=False, dropna=False):
        averages.append({
            "subjectId": subject_id if pd.notna(subject_id) else None,
            "subjectName": label_or_missing(group["subject_name"].iloc[0]),
            "term": str(term) if pd.notna(term) else None,
            "averageGrade": round_half_up(weighted_mean(group["value"].tolist(), group["weight_value"].tolist())),
            "totalGrades": len(group),
        })
    return averages
