# /lms-backend/lms/services/grade_service.py

"""
This service module is the business logic layer for everything grade-related.

It sits between the API routers and the `DatabaseService`:
1. Recording, correcting and soft-deleting grades, with the role rules of the
   school (teachers only grade the classes and subjects they teach, students
   never write grades).
2. Fetching read-only grade snapshots for a scope and handing them to the
   pure aggregation engine in `grade_helpers`.
3. Deciding who may read which statistics. A teacher's read scope is the
   classes they are assigned to and the students enrolled there.
4. Exporting a class's grades as CSV.

Business-rule violations are raised as `ValueError`, scope violations as
`PermissionError` and an unknown filter target as `LookupError`; the routers
translate them into HTTP errors. A missing primary resource is signalled by
returning None (or False), as in the rest of the service layer.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from ..models import grade_model, statistics_model
from .database_service import DatabaseService
from .grade_helpers import student_statistics, teacher_statistics, class_statistics, dashboard_statistics

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"

EXPORT_COLUMNS = [
    "No.", "Student ID", "Student Name", "Subject", "Grade Type",
    "Grade", "Weight", "Term", "Academic Year", "Remarks",
]


# --- HELPERS ---

def default_academic_year(today: Optional[datetime] = None) -> str:
    """The "YYYY-YYYY" label starting in the current calendar year."""
    year = (today or datetime.now(timezone.utc)).year
    return f"{year}-{year + 1}"


def _require_user(user_id: int, db: DatabaseService):
    user = db.get_user_by_id(user_id)
    if user is None or not user.is_active:
        raise PermissionError(f"User {user_id} does not exist or is inactive.")
    return user


def _ensure_can_modify(user, grade, db: DatabaseService) -> None:
    """Admins may change any grade; teachers need the assignment or authorship."""
    if user.role == ROLE_ADMIN:
        return
    if user.role == ROLE_TEACHER:
        assignment = db.get_teacher_assignment(user.id, grade.class_id, grade.subject_id)
        if assignment or grade.recorded_by == user.id:
            return
    raise PermissionError("You do not have permission to modify this grade.")


def _ensure_can_view_student(user, student_id: int, db: DatabaseService,
                             class_id: Optional[int] = None, subject_id: Optional[int] = None) -> None:
    """Students may only read their own grades; teachers need a class in common with the student."""
    if user.role == ROLE_ADMIN:
        return
    if user.role == ROLE_STUDENT and user.id == student_id:
        return
    if user.role == ROLE_TEACHER and db.teacher_teaches_student(user.id, student_id, class_id=class_id, subject_id=subject_id):
        return
    raise PermissionError("You do not have permission to view this student's grades.")


def _ensure_can_view_class(user, class_id: int, db: DatabaseService, subject_id: Optional[int] = None) -> None:
    if user.role == ROLE_ADMIN:
        return
    if user.role == ROLE_TEACHER and db.get_teacher_assignment(user.id, class_id, subject_id):
        return
    raise PermissionError("You do not have permission to view this class's grades.")


def _require_subject(subject_id: Optional[int], db: DatabaseService) -> None:
    if subject_id is not None and db.get_subject_by_id(subject_id) is None:
        raise LookupError(f"Subject with ID {subject_id} not found")


def _pagination(page: int, limit: int, total: int) -> grade_model.Pagination:
    return grade_model.Pagination(
        currentPage=page,
        totalPages=math.ceil(total / limit) if limit else 0,
        totalItems=total,
        itemsPerPage=limit,
    )


# --- GRADE CRUD ---

def create_grade(grade_data: grade_model.GradeCreate, db: DatabaseService, recorded_by: int) -> grade_model.Grade:
    """
    Records a new grade after checking, in order: the recorder's role, the
    teacher's assignment, the student's enrollment and uniqueness of the
    (student, subject, class, type, term, year) tuple.
    """
    recorder = _require_user(recorded_by, db)
    if recorder.role == ROLE_STUDENT:
        raise PermissionError("Students cannot record grades.")
    if recorder.role == ROLE_TEACHER and not db.get_teacher_assignment(recorder.id, grade_data.class_id, grade_data.subject_id):
        raise PermissionError("You are not assigned to grade this class and subject.")

    if not db.get_active_enrollment(grade_data.student_id, grade_data.class_id):
        raise ValueError(f"Student {grade_data.student_id} is not enrolled in class {grade_data.class_id}.")

    record = grade_data.model_dump(mode="json")
    record["academic_year"] = record.get("academic_year") or default_academic_year()

    duplicate = db.find_duplicate_grade(
        student_id=record["student_id"], subject_id=record["subject_id"], class_id=record["class_id"],
        grade_type=record["grade_type"], term=record["term"], academic_year=record["academic_year"],
    )
    if duplicate:
        raise ValueError(
            f"A {record['grade_type']} grade for this student in term {record['term']} "
            f"of {record['academic_year']} already exists. Update it instead."
        )

    record["recorded_by"] = recorder.id
    record["recorded_at"] = datetime.now(timezone.utc)
    new_grade = db.add_grade(record)
    logger.info("Grade %s recorded for student %s by user %s", new_grade.id, record["student_id"], recorder.id)
    return grade_model.Grade.model_validate(new_grade)


def get_grade(grade_id: int, db: DatabaseService) -> Optional[grade_model.Grade]:
    grade = db.get_grade_by_id(grade_id)
    return grade_model.Grade.model_validate(grade) if grade else None


def update_grade(grade_id: int, grade_update: grade_model.GradeUpdate, db: DatabaseService, updated_by: int) -> Optional[grade_model.Grade]:
    """Corrects the value, weight or remarks of a grade and re-stamps its recorder."""
    update_data = grade_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValueError("No update data provided.")

    user = _require_user(updated_by, db)
    grade = db.get_grade_by_id(grade_id)
    if grade is None:
        return None
    _ensure_can_modify(user, grade, db)

    update_data["recorded_by"] = user.id
    update_data["recorded_at"] = datetime.now(timezone.utc)
    updated = db.update_grade(grade_id, update_data)
    logger.info("Grade %s updated by user %s", grade_id, user.id)
    return grade_model.Grade.model_validate(updated)


def delete_grade(grade_id: int, db: DatabaseService, deleted_by: int) -> bool:
    user = _require_user(deleted_by, db)
    grade = db.get_grade_by_id(grade_id)
    if grade is None:
        return False
    _ensure_can_modify(user, grade, db)
    was_deleted = db.soft_delete_grade(grade_id)
    if was_deleted:
        logger.info("Grade %s soft-deleted by user %s", grade_id, user.id)
    return was_deleted


def list_grades(
    db: DatabaseService,
    requested_by: int,
    filters: Dict[str, Any],
    page: int = 1,
    limit: int = 20,
    sort_by: str = "recorded_at",
    sort_order: str = "desc",
) -> grade_model.GradeList:
    """
    Paginated grade listing, scoped by role: admins see everything, teachers
    see the classes and subjects they teach, students see only their own.
    """
    user = _require_user(requested_by, db)
    filters = dict(filters)
    pairs = None
    if user.role == ROLE_TEACHER:
        assignments = db.get_active_assignments_for_teacher(user.id)
        if not assignments:
            raise PermissionError("You have no teaching assignments.")
        pairs = [(a["class_id"], a["subject_id"]) for a in assignments]
    elif user.role == ROLE_STUDENT:
        filters["student_id"] = user.id

    rows, total = db.list_grades(filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order, pairs=pairs)
    return grade_model.GradeList(
        items=[grade_model.Grade.model_validate(r) for r in rows],
        pagination=_pagination(page, limit, total),
    )


# --- STATISTICS ---

def get_student_statistics(
    student_id: int,
    db: DatabaseService,
    requested_by: int,
    term: Optional[str] = None,
) -> Optional[statistics_model.StudentGradeStatistics]:
    """
    Builds the student's grade page. The per-year breakdown honours `term`;
    the two headline averages always cover every grade.
    """
    user = _require_user(requested_by, db)
    _ensure_can_view_student(user, student_id, db)
    if db.get_user_by_id(student_id) is None:
        return None

    records = db.get_grade_records_for_student(student_id)
    stats = student_statistics.compute_student_statistics(records, term=term)
    recent = student_statistics.recent_grades(records)

    return statistics_model.StudentGradeStatistics(
        studentId=student_id,
        term=term,
        recentGrades=[grade_model.Grade.model_validate(r) for r in recent],
        **stats,
    )


def get_student_grades(
    student_id: int,
    db: DatabaseService,
    requested_by: int,
    filters: Dict[str, Any],
    page: int = 1,
    limit: int = 20,
    sort_by: str = "recorded_at",
    sort_order: str = "desc",
) -> Optional[statistics_model.StudentGradeList]:
    """
    One page of a student's grades, plus the student's weighted average per
    (subject, term). The averages honour the class and academic year filters
    only, so they stay stable while the user pages through the list.
    """
    user = _require_user(requested_by, db)
    _ensure_can_view_student(user, student_id, db, class_id=filters.get("class_id"), subject_id=filters.get("subject_id"))
    _require_subject(filters.get("subject_id"), db)
    if db.get_user_by_id(student_id) is None:
        return None

    filters = {**filters, "student_id": student_id}
    rows, total = db.list_grades(filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    records = db.get_grade_records_for_student(
        student_id, class_id=filters.get("class_id"), academic_year=filters.get("academic_year"),
    )

    return statistics_model.StudentGradeList(
        studentId=student_id,
        items=[grade_model.Grade.model_validate(r) for r in rows],
        averages=dashboard_statistics.compute_subject_term_averages(records),
        pagination=_pagination(page, limit, total),
    )


def get_teacher_statistics(
    teacher_id: int,
    db: DatabaseService,
    requested_by: int,
    academic_year: Optional[str] = None,
    term: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "desc",
) -> Optional[statistics_model.TeacherGradeStatistics]:
    """
    Distribution statistics for every (class, subject) the teacher is
    assigned to. A teacher without assignments gets an empty, zeroed result.
    Only the teacher themself and administrators may see it.
    """
    user = _require_user(requested_by, db)
    if user.role != ROLE_ADMIN and user.id != teacher_id:
        raise PermissionError("You can only view your own teaching statistics.")
    teacher = db.get_user_by_id(teacher_id)
    if teacher is None:
        return None

    assignments = db.get_active_assignments_for_teacher(teacher_id)
    pairs = [(a["class_id"], a["subject_id"]) for a in assignments]
    records = db.get_grade_records_for_pairs(pairs, academic_year=academic_year, term=term)

    stats = teacher_statistics.compute_teacher_statistics(assignments, records, academic_year=academic_year, term=term)
    if sort_by:
        stats["perGroup"] = teacher_statistics.sort_group_statistics(stats["perGroup"], sort_by=sort_by, order=sort_order)

    return statistics_model.TeacherGradeStatistics(
        teacherId=teacher_id,
        filters=statistics_model.StatisticsFilters(academicYear=academic_year, term=term),
        **stats,
    )


def get_class_statistics(
    class_id: int,
    db: DatabaseService,
    requested_by: int,
    subject_id: Optional[int] = None,
    term: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> Optional[statistics_model.ClassGradeReport]:
    user = _require_user(requested_by, db)
    _ensure_can_view_class(user, class_id, db, subject_id=subject_id)
    _require_subject(subject_id, db)
    db_class = db.get_class_by_id(class_id)
    if db_class is None:
        return None

    records = db.get_grade_records_for_class(class_id, subject_id=subject_id, term=term, academic_year=academic_year)
    return statistics_model.ClassGradeReport(
        classId=db_class.id,
        className=db_class.name,
        filters=statistics_model.StatisticsFilters(academicYear=academic_year, term=term),
        subjects=class_statistics.compute_class_subject_report(records),
    )


def get_class_student_statistics(
    class_id: int,
    db: DatabaseService,
    requested_by: int,
    academic_year: Optional[str] = None,
    term: Optional[str] = None,
    grade_type: Optional[str] = None,
) -> Optional[statistics_model.ClassStudentStatistics]:
    """Per-student weighted averages for one class, best student first."""
    user = _require_user(requested_by, db)
    _ensure_can_view_class(user, class_id, db)
    db_class = db.get_class_by_id(class_id)
    if db_class is None:
        return None

    records = db.get_grade_records_for_class(class_id, term=term, academic_year=academic_year, grade_type=grade_type)
    students = db.get_users_by_ids(sorted({r["student_id"] for r in records}))
    stats = dashboard_statistics.compute_class_grade_stats(records, students)

    return statistics_model.ClassStudentStatistics(
        classId=db_class.id,
        className=db_class.name,
        classCode=db_class.code,
        filters=statistics_model.StatisticsFilters(academicYear=academic_year, term=term, gradeType=grade_type),
        **stats,
    )


def get_school_statistics(
    db: DatabaseService,
    requested_by: int,
    academic_year: Optional[str] = None,
    term: Optional[str] = None,
) -> statistics_model.SchoolGradeStatistics:
    """
    School-wide grade overview for administrators. Only students who still
    have an active enrollment are counted.
    """
    user = _require_user(requested_by, db)
    if user.role != ROLE_ADMIN:
        raise PermissionError("Only administrators can view school-wide statistics.")

    records = db.get_grade_records_for_school(academic_year=academic_year, term=term)
    stats = dashboard_statistics.compute_school_grade_stats(records)
    logger.info("School statistics computed over %s grades", stats["overall"]["totalGrades"])
    return statistics_model.SchoolGradeStatistics(
        filters=statistics_model.StatisticsFilters(academicYear=academic_year, term=term),
        **stats,
    )


def get_academic_years(db: DatabaseService) -> List[str]:
    return db.get_distinct_academic_years()


# --- EXPORT ---

def export_grades_as_csv(
    class_id: int,
    db: DatabaseService,
    requested_by: int,
    subject_id: Optional[int] = None,
    term: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> str:
    """
    Serialises a class's grades to CSV, ordered by student name, subject and
    grade type. Raises ValueError if the class does not exist.
    """
    user = _require_user(requested_by, db)
    _ensure_can_view_class(user, class_id, db, subject_id=subject_id)
    _require_subject(subject_id, db)
    if db.get_class_by_id(class_id) is None:
        raise ValueError(f"Class with ID {class_id} not found")

    records = db.get_grade_records_for_class(class_id, subject_id=subject_id, term=term, academic_year=academic_year)
    students = db.get_users_by_ids(sorted({r["student_id"] for r in records}))

    df = pd.DataFrame([
        {
            "Student ID": r["student_id"],
            "Student Name": getattr(students.get(r["student_id"]), "name", ""),
            "Subject": r["subject_name"] or "",
            "Grade Type": r["grade_type"],
            "Grade": float(r["grade_value"]),
            "Weight": float(r["weight"]) if r["weight"] is not None else 1.0,
            "Term": r["term"],
            "Academic Year": r["academic_year"],
            "Remarks": r.get("remarks") or "",
        }
        for r in records
    ], columns=EXPORT_COLUMNS[1:])

    df = df.sort_values(["Student Name", "Subject", "Grade Type"], kind="stable").reset_index(drop=True)
    df.insert(0, "No.", range(1, len(df) + 1))
    return df.to_csv(index=False)
