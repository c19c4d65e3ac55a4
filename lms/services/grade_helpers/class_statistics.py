# /lms-backend/lms/services/grade_helpers/class_statistics.py

"""
Per-subject grade report for a single class.

This is the school-report view used by the grade management screen. It uses
its own five-tier scale, which is NOT the teacher dashboard's four-tier scale;
the two evolve independently and must not be merged.
"""

from typing import Any, Dict, List

import pandas as pd

from .decimal_parsing import round_half_up
from .percentage import count_passing, rounded_percentage
from .records import records_to_frame, label_or_missing, simple_mean

# Five-tier school report scale, evaluated top-down.
REPORT_DISTRIBUTION_TIERS = (
    ("excellent", 9),
    ("good", 8),
    ("fair", 6.5),
    ("average", 5),
)
REPORT_LOWEST_TIER = "poor"


def bucket_report_distribution(values: List[float]) -> Dict[str, int]:
    counts = {name: 0 for name, _ in REPORT_DISTRIBUTION_TIERS}
    counts[REPORT_LOWEST_TIER] = 0
    for value in values:
        for name, floor in REPORT_DISTRIBUTION_TIERS:
            if value >= floor:
                counts[name] += 1
                break
        else:
            counts[REPORT_LOWEST_TIER] += 1
    return counts


def compute_class_subject_report(records: List[Any]) -> List[Dict[str, Any]]:
    """
    Groups one class's grades by subject and summarises each subject.

    The caller is expected to have already narrowed `records` to a single
    class (and optionally a subject, term or academic year).

    Returns a list of per-subject dicts in first-seen order, each with
    averageGrade, minGrade, maxGrade, totalGrades, passingGrades, passRate
    and the five-tier `distribution`.
    """
    df = records_to_frame(records)
    if df.empty:
        return []

    report = []
    for subject_id, subject_df in df.groupby("subject_id", sort=False, dropna=False):
        values = subject_df["value"].tolist()
        passing = count_passing(values)
        report.append({
            "subjectId": subject_id if pd.notna(subject_id) else None,
            "subjectName": label_or_missing(subject_df["subject_name"].iloc[0]),
            "averageGrade": round_half_up(simple_mean(values)),
            "minGrade": min(values),
            "maxGrade": max(values),
            "totalGrades": len(values),
            "passingGrades": passing,
            "passRate": rounded_percentage(passing, len(values), 1),
            "distribution": bucket_report_distribution(values),
        })
    return report
