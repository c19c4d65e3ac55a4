# /tests/test_grade_repository_sql.py

import pytest
from datetime import datetime, timezone


def add_grade(db_service, school, student="alice", subject="math", value=8.0, **overrides):
    record = {
        "student_id": school[student].id,
        "class_id": school["class"].id,
        "subject_id": school[subject].id,
        "grade_value": value,
        "grade_type": "homework",
        "weight": 1.0,
        "term": "1",
        "academic_year": "2024-2025",
        "recorded_by": school["teacher"].id,
        "recorded_at": datetime(2024, 10, 1, tzinfo=timezone.utc),
    }
    record.update(overrides)
    return db_service.add_grade(record)


def test_add_and_get_grade(db_service, school):
    grade = add_grade(db_service, school, value=8.5)

    fetched = db_service.get_grade_by_id(grade.id)

    assert fetched is not None
    assert float(fetched.grade_value) == 8.5
    assert fetched.is_active is True
    print("\n✅ SUCCESS: test_add_and_get_grade passed.")


def test_soft_delete_hides_grade(db_service, school):
    grade = add_grade(db_service, school)

    assert db_service.soft_delete_grade(grade.id) is True
    assert db_service.get_grade_by_id(grade.id) is None
    assert db_service.soft_delete_grade(grade.id) is False
    assert db_service.get_grade_records_for_student(school["alice"].id) == []


def test_find_duplicate_grade(db_service, school):
    add_grade(db_service, school, grade_type="quiz")
    identity = {
        "student_id": school["alice"].id, "subject_id": school["math"].id, "class_id": school["class"].id,
        "grade_type": "quiz", "term": "1", "academic_year": "2024-2025",
    }
    assert db_service.find_duplicate_grade(**identity) is not None
    assert db_service.find_duplicate_grade(**{**identity, "term": "2"}) is None


def test_update_grade(db_service, school):
    grade = add_grade(db_service, school, value=5.0)
    updated = db_service.update_grade(grade.id, {"grade_value": 6.25, "remarks": "Re-marked"})
    assert float(updated.grade_value) == 6.25
    assert updated.remarks == "Re-marked"
    assert db_service.update_grade(9999, {"grade_value": 1}) is None


def test_records_carry_names(db_service, school):
    add_grade(db_service, school, subject="physics", value=7.0)

    records = db_service.get_grade_records_for_student(school["alice"].id)

    assert len(records) == 1
    assert records[0]["subject_name"] == "Physics"
    assert records[0]["class_name"] == "10A1"
    assert float(records[0]["grade_value"]) == 7.0


def test_records_for_pairs(db_service, school):
    add_grade(db_service, school, subject="math", value=9.0)
    add_grade(db_service, school, subject="physics", value=3.0)
    add_grade(db_service, school, subject="math", value=6.0, term="2")
    pair = [(school["class"].id, school["math"].id)]

    assert len(db_service.get_grade_records_for_pairs(pair)) == 2
    assert len(db_service.get_grade_records_for_pairs(pair, term="2")) == 1
    assert db_service.get_grade_records_for_pairs([]) == []


def test_records_for_class(db_service, school):
    add_grade(db_service, school, subject="math")
    add_grade(db_service, school, student="bob", subject="physics")
    class_id = school["class"].id

    assert len(db_service.get_grade_records_for_class(class_id)) == 2
    assert len(db_service.get_grade_records_for_class(class_id, subject_id=school["physics"].id)) == 1
    assert db_service.get_grade_records_for_class(class_id, academic_year="2020-2021") == []


def test_list_grades_pagination_and_scope(db_service, school):
    for i in range(5):
        add_grade(db_service, school, value=float(i + 5), grade_type=f"t{i}")
    add_grade(db_service, school, subject="physics", value=1.0)

    rows, total = db_service.list_grades({}, page=2, limit=2, sort_by="grade_value", sort_order="asc")
    assert total == 6
    assert [float(r.grade_value) for r in rows] == [6.0, 7.0]

    pair = [(school["class"].id, school["math"].id)]
    rows, total = db_service.list_grades({}, page=1, limit=10, sort_by="recorded_at", sort_order="desc", pairs=pair)
    assert total == 5

    rows, total = db_service.list_grades({}, page=1, limit=10, sort_by="recorded_at", sort_order="desc", pairs=[])
    assert (rows, total) == ([], 0)


def test_list_grades_rejects_unknown_sort(db_service, school):
    with pytest.raises(ValueError):
        db_service.list_grades({}, page=1, limit=10, sort_by="student_name", sort_order="asc")


def test_distinct_academic_years(db_service, school):
    add_grade(db_service, school, academic_year="2023-2024")
    add_grade(db_service, school, academic_year="2024-2025", term="2")
    add_grade(db_service, school, academic_year="2024-2025", grade_type="quiz")
    assert db_service.get_distinct_academic_years() == ["2024-2025", "2023-2024"]


def test_active_assignments_for_teacher(db_service, school):
    assignments = db_service.get_active_assignments_for_teacher(school["teacher"].id)
    assert assignments == [{
        "class_id": school["class"].id, "class_name": "10A1", "class_code": "10A1",
        "subject_id": school["math"].id, "subject_name": "Math", "academic_year": "2024-2025",
    }]
    assert db_service.get_active_assignments_for_teacher(school["idle_teacher"].id) == []
    assert db_service.get_teacher_assignment(school["teacher"].id, school["class"].id, school["physics"].id) is None


def test_records_carry_class_code_and_narrow_by_class_and_year(db_service, school):
    add_grade(db_service, school, value=7.0)
    add_grade(db_service, school, value=6.0, academic_year="2023-2024")
    alice = school["alice"].id

    records = db_service.get_grade_records_for_student(alice, academic_year="2024-2025")
    assert [r["class_code"] for r in records] == ["10A1"]
    assert len(db_service.get_grade_records_for_student(alice, class_id=school["class"].id)) == 2
    assert db_service.get_grade_records_for_student(alice, class_id=9999) == []


def test_records_for_class_by_grade_type(db_service, school):
    add_grade(db_service, school, grade_type="quiz")
    add_grade(db_service, school, grade_type="midterm")
    records = db_service.get_grade_records_for_class(school["class"].id, grade_type="midterm")
    assert [r["grade_type"] for r in records] == ["midterm"]


def test_records_for_school_skip_students_without_active_enrollment(db_service, school):
    carol = db_service.add_user({"name": "Carol", "email": "carol@school.test", "role": "student"})
    db_service.add_enrollment({"class_id": school["class"].id, "student_id": carol.id, "status": "transferred"})
    add_grade(db_service, school, value=9.0)
    add_grade(db_service, school, value=2.0, student_id=carol.id)
    add_grade(db_service, school, value=5.0, term="2")

    records = db_service.get_grade_records_for_school()
    assert [float(r["grade_value"]) for r in records] == [9.0, 5.0]
    assert len(db_service.get_grade_records_for_school(term="2")) == 1
    assert db_service.get_grade_records_for_school(academic_year="2020-2021") == []


def test_teacher_teaches_student(db_service, school):
    teacher, alice = school["teacher"].id, school["alice"].id
    outsider = db_service.add_user({"name": "Dan", "email": "dan@school.test", "role": "student"})

    assert db_service.teacher_teaches_student(teacher, alice) is True
    assert db_service.teacher_teaches_student(teacher, alice, subject_id=school["math"].id) is True
    assert db_service.teacher_teaches_student(teacher, alice, subject_id=school["physics"].id) is False
    assert db_service.teacher_teaches_student(teacher, outsider.id) is False
    assert db_service.teacher_teaches_student(school["idle_teacher"].id, alice) is False
