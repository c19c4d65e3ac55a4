# /tests/test_class_statistics.py

from decimal import Decimal

from lms.services.grade_helpers import class_statistics


def make_grade(value, subject_id=10, subject_name="Math"):
    return {
        "student_id": 1, "class_id": 1, "subject_id": subject_id, "subject_name": subject_name,
        "grade_value": value, "weight": 1, "academic_year": "2024-2025", "term": "1",
    }


def test_report_per_subject():
    records = [
        make_grade(Decimal("9.00")), make_grade(Decimal("6.50")), make_grade(Decimal("4.00")),
        make_grade(8, subject_id=11, subject_name="Physics"),
    ]

    report = class_statistics.compute_class_subject_report(records)

    assert [s["subjectName"] for s in report] == ["Math", "Physics"]
    math = report[0]
    assert math["subjectId"] == 10
    assert math["averageGrade"] == 6.5
    assert math["minGrade"] == 4.0
    assert math["maxGrade"] == 9.0
    assert math["totalGrades"] == 3
    assert math["passingGrades"] == 2
    assert math["passRate"] == 66.7
    assert math["distribution"] == {"excellent": 1, "good": 0, "fair": 1, "average": 0, "poor": 1}
    print("\n✅ SUCCESS: test_report_per_subject passed.")


def test_five_tier_boundaries():
    counts = class_statistics.bucket_report_distribution([9, 8.99, 8, 6.5, 6.49, 5, 4.99])
    assert counts == {"excellent": 1, "good": 2, "fair": 1, "average": 2, "poor": 1}


def test_empty_report():
    assert class_statistics.compute_class_subject_report([]) == []


def test_subject_without_name():
    report = class_statistics.compute_class_subject_report([make_grade(7, subject_name=None)])
    assert report[0]["subjectName"] == "N/A"


def test_out_of_range_values_land_in_the_outer_tiers():
    report = class_statistics.compute_class_subject_report([make_grade(12), make_grade(-1)])

    assert report[0]["distribution"]["excellent"] == 1
    assert report[0]["distribution"]["poor"] == 1
    assert report[0]["passRate"] == 50.0
    assert report[0]["maxGrade"] == 12.0
