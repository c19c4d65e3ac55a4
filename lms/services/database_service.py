# /lms-backend/lms/services/database_service.py

from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from fastapi import Depends

# --- Core Database Setup ---
from lms.db.database import get_db

# --- Repository Imports ---
from .database_helpers.grade_repository_sql import GradeRepositorySQL
from .database_helpers.school_repository_sql import SchoolRepositorySQL


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        A single facade over every repository, so that services depend on one
        object and tests can replace it with one mock.
        """
        if db_session is None:
            raise ValueError("A database session is required.")
        self.grade_repo = GradeRepositorySQL(db_session)
        self.school_repo = SchoolRepositorySQL(db_session)

    # --- ROSTER METHODS (DELEGATED) ---
    def get_user_by_id(self, user_id: int): return self.school_repo.get_user_by_id(user_id)
    def get_users_by_ids(self, user_ids: List[int]) -> Dict: return self.school_repo.get_users_by_ids(user_ids)
    def get_class_by_id(self, class_id: int): return self.school_repo.get_class_by_id(class_id)
    def get_subject_by_id(self, subject_id: int): return self.school_repo.get_subject_by_id(subject_id)
    def get_teacher_assignment(self, teacher_id: int, class_id: int, subject_id: Optional[int] = None):
        return self.school_repo.get_teacher_assignment(teacher_id, class_id, subject_id)
    def get_active_assignments_for_teacher(self, teacher_id: int) -> List[Dict]: return self.school_repo.get_active_assignments_for_teacher(teacher_id)
    def get_active_enrollment(self, student_id: int, class_id: int): return self.school_repo.get_active_enrollment(student_id, class_id)
    def teacher_teaches_student(self, teacher_id: int, student_id: int, class_id: Optional[int] = None, subject_id: Optional[int] = None) -> bool:
        return self.school_repo.teacher_teaches_student(teacher_id, student_id, class_id=class_id, subject_id=subject_id)
    def add_user(self, record: Dict): return self.school_repo.add_user(record)
    def add_class(self, record: Dict): return self.school_repo.add_class(record)
    def add_subject(self, record: Dict): return self.school_repo.add_subject(record)
    def add_teacher_assignment(self, record: Dict): return self.school_repo.add_teacher_assignment(record)
    def add_enrollment(self, record: Dict): return self.school_repo.add_enrollment(record)

    # --- GRADE METHODS (DELEGATED) ---
    def get_grade_by_id(self, grade_id: int): return self.grade_repo.get_grade_by_id(grade_id)
    def find_duplicate_grade(self, **identity): return self.grade_repo.find_duplicate_grade(**identity)
    def add_grade(self, record: Dict): return self.grade_repo.add_grade(record)
    def update_grade(self, grade_id: int, data: Dict): return self.grade_repo.update_grade(grade_id, data)
    def soft_delete_grade(self, grade_id: int) -> bool: return self.grade_repo.soft_delete_grade(grade_id)
    def list_grades(self, filters: Dict[str, Any], page: int, limit: int, sort_by: str, sort_order: str,
                    pairs: Optional[Sequence[Tuple[int, int]]] = None):
        return self.grade_repo.list_grades(filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order, pairs=pairs)

    # --- STATISTICS SNAPSHOTS (DELEGATED) ---
    def get_grade_records_for_student(self, student_id: int, class_id: Optional[int] = None, academic_year: Optional[str] = None) -> List[Dict]:
        return self.grade_repo.get_grade_records_for_student(student_id, class_id=class_id, academic_year=academic_year)
    def get_grade_records_for_pairs(self, pairs: Sequence[Tuple[int, int]], academic_year: Optional[str] = None, term: Optional[str] = None) -> List[Dict]:
        return self.grade_repo.get_grade_records_for_pairs(pairs, academic_year=academic_year, term=term)
    def get_grade_records_for_class(self, class_id: int, subject_id: Optional[int] = None, term: Optional[str] = None,
                                    academic_year: Optional[str] = None, grade_type: Optional[str] = None) -> List[Dict]:
        return self.grade_repo.get_grade_records_for_class(class_id, subject_id=subject_id, term=term, academic_year=academic_year, grade_type=grade_type)
    def get_grade_records_for_school(self, academic_year: Optional[str] = None, term: Optional[str] = None) -> List[Dict]:
        return self.grade_repo.get_grade_records_for_school(academic_year=academic_year, term=term)
    def get_distinct_academic_years(self) -> List[str]: return self.grade_repo.get_distinct_academic_years()


# --- DEPENDENCY PROVIDER ---
def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """
    FastAPI dependency that provides a DatabaseService bound to the
    request's session.
    """
    yield DatabaseService(db_session=db)
