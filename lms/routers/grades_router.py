# /lms-backend/lms/routers/grades_router.py

"""
This module defines the public-facing API for grades and grade statistics.

The router is the "thin" layer: it reads the request, delegates to
`grade_service`, and translates the service's exceptions into HTTP errors.
The acting user is identified by the `X-User-Id` header; verifying who that
user really is belongs to the authentication layer in front of this API.
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from typing import List, Optional

from ..models import grade_model, statistics_model
from ..services import grade_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.grade_helpers.decimal_parsing import GradeValueError

router = APIRouter()


def _translate_errors(exc: Exception) -> HTTPException:
    """Maps the service layer's exceptions onto HTTP status codes."""
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, GradeValueError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# --- GRADE COLLECTION ENDPOINTS (/api/grades) ---

@router.post("", response_model=grade_model.Grade, status_code=status.HTTP_201_CREATED, summary="Record a New Grade")
def create_grade(
    grade_create: grade_model.GradeCreate,
    x_user_id: int = Header(..., description="ID of the admin or teacher recording the grade."),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return grade_service.create_grade(grade_data=grade_create, db=db, recorded_by=x_user_id)
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)


@router.get("", response_model=grade_model.GradeList, summary="List Grades")
def list_grades(
    x_user_id: int = Header(...),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    classId: Optional[int] = None,
    subjectId: Optional[int] = None,
    studentId: Optional[int] = None,
    term: Optional[grade_model.Term] = None,
    academicYear: Optional[str] = None,
    gradeType: Optional[grade_model.GradeType] = None,
    sortBy: str = "recorded_at",
    sortOrder: str = Query("desc", pattern="^(asc|desc)$"),
    db: DatabaseService = Depends(get_db_service),
):
    filters = {
        "class_id": classId,
        "subject_id": subjectId,
        "student_id": studentId,
        "term": term.value if term else None,
        "academic_year": academicYear,
        "grade_type": gradeType.value if gradeType else None,
    }
    try:
        return grade_service.list_grades(
            db=db, requested_by=x_user_id, filters=filters,
            page=page, limit=limit, sort_by=sortBy, sort_order=sortOrder,
        )
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)


@router.get("/academic-years", response_model=List[str], summary="List Academic Years With Grades")
def get_academic_years(db: DatabaseService = Depends(get_db_service)):
    return grade_service.get_academic_years(db=db)


# --- STATISTICS ENDPOINTS ---

@router.get(
    "/school-statistics",
    response_model=statistics_model.SchoolGradeStatistics,
    summary="Get School-Wide Grade Statistics",
    description="Grade figures by type, term and class over every actively enrolled student. Administrators only.",
)
def get_school_statistics(
    x_user_id: int = Header(...),
    academicYear: Optional[str] = None,
    term: Optional[grade_model.Term] = None,
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return grade_service.get_school_statistics(
            db=db, requested_by=x_user_id, academic_year=academicYear, term=term.value if term else None,
        )
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)


@router.get("/students/{student_id}", response_model=statistics_model.StudentGradeList, summary="List a Student's Grades")
def get_student_grades(
    student_id: int,
    x_user_id: int = Header(...),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    classId: Optional[int] = None,
    subjectId: Optional[int] = None,
    term: Optional[grade_model.Term] = None,
    academicYear: Optional[str] = None,
    gradeType: Optional[grade_model.GradeType] = None,
    sortBy: str = "recorded_at",
    sortOrder: str = Query("desc", pattern="^(asc|desc)$"),
    db: DatabaseService = Depends(get_db_service),
):
    filters = {
        "class_id": classId,
        "subject_id": subjectId,
        "term": term.value if term else None,
        "academic_year": academicYear,
        "grade_type": gradeType.value if gradeType else None,
    }
    try:
        result = grade_service.get_student_grades(
            student_id=student_id, db=db, requested_by=x_user_id, filters=filters,
            page=page, limit=limit, sort_by=sortBy, sort_order=sortOrder,
        )
    except (PermissionError, LookupError, ValueError) as e:
        raise _translate_errors(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return result


@router.get(
    "/students/{student_id}/statistics",
    response_model=statistics_model.StudentGradeStatistics,
    summary="Get a Student's Grade Statistics",
    description="Per-year and per-subject averages for one student, plus the cumulative and current-year averages.",
)
def get_student_statistics(
    student_id: int,
    x_user_id: int = Header(...),
    term: Optional[grade_model.Term] = None,
    db: DatabaseService = Depends(get_db_service),
):
    try:
        result = grade_service.get_student_statistics(
            student_id=student_id, db=db, requested_by=x_user_id, term=term.value if term else None,
        )
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return result


@router.get(
    "/teachers/{teacher_id}/statistics",
    response_model=statistics_model.TeacherGradeStatistics,
    summary="Get Grade Statistics Across a Teacher's Classes",
)
def get_teacher_statistics(
    teacher_id: int,
    x_user_id: int = Header(...),
    academicYear: Optional[str] = None,
    term: Optional[grade_model.Term] = None,
    sortBy: Optional[str] = Query(None, description="'grade' or 'students'."),
    sortOrder: str = "desc",
    db: DatabaseService = Depends(get_db_service),
):
    try:
        result = grade_service.get_teacher_statistics(
            teacher_id=teacher_id, db=db, requested_by=x_user_id, academic_year=academicYear,
            term=term.value if term else None, sort_by=sortBy, sort_order=sortOrder,
        )
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Teacher with ID {teacher_id} not found")
    return result


@router.get(
    "/classes/{class_id}/statistics",
    response_model=statistics_model.ClassGradeReport,
    summary="Get a Class's Per-Subject Grade Report",
)
def get_class_statistics(
    class_id: int,
    x_user_id: int = Header(...),
    subjectId: Optional[int] = None,
    term: Optional[grade_model.Term] = None,
    academicYear: Optional[str] = None,
    db: DatabaseService = Depends(get_db_service),
):
    try:
        result = grade_service.get_class_statistics(
            class_id=class_id, db=db, requested_by=x_user_id, subject_id=subjectId,
            term=term.value if term else None, academic_year=academicYear,
        )
    except (PermissionError, LookupError, ValueError) as e:
        raise _translate_errors(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Class with ID {class_id} not found")
    return result


@router.get(
    "/classes/{class_id}/student-statistics",
    response_model=statistics_model.ClassStudentStatistics,
    summary="Get Per-Student Grade Statistics for a Class",
)
def get_class_student_statistics(
    class_id: int,
    x_user_id: int = Header(...),
    academicYear: Optional[str] = None,
    term: Optional[grade_model.Term] = None,
    gradeType: Optional[grade_model.GradeType] = None,
    db: DatabaseService = Depends(get_db_service),
):
    try:
        result = grade_service.get_class_student_statistics(
            class_id=class_id, db=db, requested_by=x_user_id, academic_year=academicYear,
            term=term.value if term else None, grade_type=gradeType.value if gradeType else None,
        )
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Class with ID {class_id} not found")
    return result


@router.get("/classes/{class_id}/export", summary="Export a Class's Grades as CSV", response_class=StreamingResponse)
def export_class_grades_csv(
    class_id: int,
    x_user_id: int = Header(...),
    subjectId: Optional[int] = None,
    term: Optional[grade_model.Term] = None,
    academicYear: Optional[str] = None,
    db: DatabaseService = Depends(get_db_service),
):
    try:
        csv_string = grade_service.export_grades_as_csv(
            class_id=class_id, db=db, requested_by=x_user_id, subject_id=subjectId,
            term=term.value if term else None, academic_year=academicYear,
        )
    except PermissionError as e:
        raise _translate_errors(e)
    except (LookupError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    file_name = f"grades_class_{class_id}.csv"
    return StreamingResponse(iter([csv_string]), media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={file_name}"})


# --- INDIVIDUAL GRADE RESOURCE ENDPOINTS (/api/grades/{grade_id}) ---

@router.get("/{grade_id}", response_model=grade_model.Grade, summary="Get a Single Grade")
def get_grade(grade_id: int, db: DatabaseService = Depends(get_db_service)):
    grade = grade_service.get_grade(grade_id=grade_id, db=db)
    if grade is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Grade with ID {grade_id} not found")
    return grade


@router.put("/{grade_id}", response_model=grade_model.Grade, summary="Correct a Grade")
def update_grade(
    grade_id: int,
    grade_update: grade_model.GradeUpdate,
    x_user_id: int = Header(...),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        updated_grade = grade_service.update_grade(grade_id=grade_id, grade_update=grade_update, db=db, updated_by=x_user_id)
    except (PermissionError, ValueError) as e:
        raise _translate_errors(e)
    if updated_grade is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Grade with ID {grade_id} not found")
    return updated_grade


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Grade")
def delete_grade(grade_id: int, x_user_id: int = Header(...), db: DatabaseService = Depends(get_db_service)):
    try:
        was_deleted = grade_service.delete_grade(grade_id=grade_id, db=db, deleted_by=x_user_id)
    except PermissionError as e:
        raise _translate_errors(e)
    if not was_deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Grade with ID {grade_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
