# /lms-backend/lms/services/database_helpers/grade_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the Grade table.
It is the only writer of grade rows; the statistics engine receives the
read-only snapshots produced by the `get_grade_records_*` methods.

Every read excludes soft-deleted grades (`is_active = False`).
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from lms.db.models.grade_models import Grade
from lms.db.models.school_models import Class, ClassStudent, Subject

# Columns a caller may sort the grade listing by.
SORTABLE_COLUMNS = {
    "recorded_at": Grade.recorded_at,
    "grade_value": Grade.grade_value,
    "academic_year": Grade.academic_year,
    "term": Grade.term,
    "grade_type": Grade.grade_type,
}

FILTERABLE_COLUMNS = ("class_id", "subject_id", "student_id", "term", "academic_year", "grade_type")


def _to_record(grade: Grade, subject_name: Optional[str], class_name: Optional[str], class_code: Optional[str]) -> Dict[str, Any]:
    """Flattens a Grade row and its joined names into the engine's record shape."""
    return {
        "id": grade.id,
        "student_id": grade.student_id,
        "class_id": grade.class_id,
        "class_name": class_name,
        "class_code": class_code,
        "subject_id": grade.subject_id,
        "subject_name": subject_name,
        "grade_value": grade.grade_value,
        "grade_type": grade.grade_type,
        "weight": grade.weight,
        "term": grade.term,
        "academic_year": grade.academic_year,
        "remarks": grade.remarks,
        "recorded_by": grade.recorded_by,
        "recorded_at": grade.recorded_at,
    }


class GradeRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Single-grade CRUD ---

    def get_grade_by_id(self, grade_id: int) -> Optional[Grade]:
        return self.db.query(Grade).filter(Grade.id == grade_id, Grade.is_active.is_(True)).first()

    def find_duplicate_grade(
        self, student_id: int, subject_id: int, class_id: int,
        grade_type: str, term: str, academic_year: str
    ) -> Optional[Grade]:
        """
        A student has at most one active grade per subject, class, grade type,
        term and academic year. Returns the existing one, if any.
        """
        return (
            self.db.query(Grade)
            .filter(
                Grade.student_id == student_id,
                Grade.subject_id == subject_id,
                Grade.class_id == class_id,
                Grade.grade_type == grade_type,
                Grade.term == term,
                Grade.academic_year == academic_year,
                Grade.is_active.is_(True),
            )
            .first()
        )

    def add_grade(self, record: Dict) -> Grade:
        new_grade = Grade(**record)
        self.db.add(new_grade)
        self.db.commit()
        self.db.refresh(new_grade)
        return new_grade

    def update_grade(self, grade_id: int, data: Dict) -> Optional[Grade]:
        db_grade = self.get_grade_by_id(grade_id)
        if db_grade:
            for key, value in data.items():
                setattr(db_grade, key, value)
            self.db.commit()
            self.db.refresh(db_grade)
        return db_grade

    def soft_delete_grade(self, grade_id: int) -> bool:
        """Flags a grade inactive. The row stays for historical reports."""
        db_grade = self.get_grade_by_id(grade_id)
        if db_grade:
            db_grade.is_active = False
            self.db.commit()
            return True
        return False

    # --- Listing ---

    def list_grades(
        self,
        filters: Dict[str, Any],
        page: int = 1,
        limit: int = 20,
        sort_by: str = "recorded_at",
        sort_order: str = "desc",
        pairs: Optional[Sequence[Tuple[int, int]]] = None,
    ) -> Tuple[List[Grade], int]:
        """
        Returns one page of active grades and the total number of matches.
        `pairs`, when given, restricts the listing to those (class_id,
        subject_id) combinations; it is how a teacher's listing is scoped.
        """
        if sort_by not in SORTABLE_COLUMNS:
            raise ValueError(f"Cannot sort grades by '{sort_by}'.")

        query = self.db.query(Grade).filter(Grade.is_active.is_(True))
        for name in FILTERABLE_COLUMNS:
            value = filters.get(name)
            if value is not None:
                query = query.filter(getattr(Grade, name) == value)
        if pairs is not None:
            if not pairs:
                return [], 0
            query = query.filter(self._pairs_clause(pairs))

        total = query.count()
        column = SORTABLE_COLUMNS[sort_by]
        ordering = column.asc() if sort_order.lower() == "asc" else column.desc()
        rows = query.order_by(ordering, Grade.id).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    # --- Snapshots for the statistics engine ---

    def _record_query(self):
        return (
            self.db.query(
                Grade, Subject.name.label("subject_name"),
                Class.name.label("class_name"), Class.code.label("class_code"),
            )
            .outerjoin(Subject, Subject.id == Grade.subject_id)
            .outerjoin(Class, Class.id == Grade.class_id)
            .filter(Grade.is_active.is_(True))
        )

    @staticmethod
    def _pairs_clause(pairs: Sequence[Tuple[int, int]]):
        return or_(*[and_(Grade.class_id == c, Grade.subject_id == s) for c, s in pairs])

    def get_grade_records_for_student(
        self,
        student_id: int,
        class_id: Optional[int] = None,
        academic_year: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Every active grade of one student, optionally narrowed to a class or year."""
        query = self._record_query().filter(Grade.student_id == student_id)
        if class_id is not None:
            query = query.filter(Grade.class_id == class_id)
        if academic_year:
            query = query.filter(Grade.academic_year == academic_year)
        return [_to_record(*row) for row in query.order_by(Grade.id).all()]

    def get_grade_records_for_pairs(
        self,
        pairs: Sequence[Tuple[int, int]],
        academic_year: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Active grades belonging to any of the given (class_id, subject_id) pairs."""
        if not pairs:
            return []
        query = self._record_query().filter(self._pairs_clause(pairs))
        if academic_year:
            query = query.filter(Grade.academic_year == academic_year)
        if term:
            query = query.filter(Grade.term == term)
        return [_to_record(*row) for row in query.order_by(Grade.id).all()]

    def get_grade_records_for_class(
        self,
        class_id: int,
        subject_id: Optional[int] = None,
        term: Optional[str] = None,
        academic_year: Optional[str] = None,
        grade_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query = self._record_query().filter(Grade.class_id == class_id)
        if subject_id is not None:
            query = query.filter(Grade.subject_id == subject_id)
        if term:
            query = query.filter(Grade.term == term)
        if academic_year:
            query = query.filter(Grade.academic_year == academic_year)
        if grade_type:
            query = query.filter(Grade.grade_type == grade_type)
        return [_to_record(*row) for row in query.order_by(Grade.id).all()]

    def get_grade_records_for_school(
        self,
        academic_year: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Active grades of every student who still has an active enrollment
        somewhere. Grades of students who left the school are not counted.
        """
        enrolled = select(ClassStudent.student_id).where(ClassStudent.status == "active")
        query = self._record_query().filter(Grade.student_id.in_(enrolled))
        if academic_year:
            query = query.filter(Grade.academic_year == academic_year)
        if term:
            query = query.filter(Grade.term == term)
        return [_to_record(*row) for row in query.order_by(Grade.id).all()]

    def get_distinct_academic_years(self) -> List[str]:
        """Distinct academic years that have grades, newest label first."""
        rows = (
            self.db.query(Grade.academic_year)
            .filter(Grade.academic_year.isnot(None), Grade.is_active.is_(True))
            .distinct()
            .order_by(Grade.academic_year.desc())
            .all()
        )
        return [year for (year,) in rows if year]
