# /lms-backend/lms/services/database_helpers/school_repository_sql.py

"""
This module contains the SQLAlchemy queries for the roster tables that the
grade features depend on: users, classes, subjects, teaching assignments and
class enrollments.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from lms.db.models.school_models import User, Class, Subject, TeacherAssignment, ClassStudent


class SchoolRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _add(self, instance):
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    # --- Lookups ---

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_class_by_id(self, class_id: int) -> Optional[Class]:
        return self.db.query(Class).filter(Class.id == class_id).first()

    def get_subject_by_id(self, subject_id: int) -> Optional[Subject]:
        return self.db.query(Subject).filter(Subject.id == subject_id).first()

    def get_teacher_assignment(self, teacher_id: int, class_id: int, subject_id: Optional[int] = None) -> Optional[TeacherAssignment]:
        """
        Returns an active assignment of the teacher to the class, and to the
        subject when one is given.
        """
        query = self.db.query(TeacherAssignment).filter(
            TeacherAssignment.teacher_id == teacher_id,
            TeacherAssignment.class_id == class_id,
            TeacherAssignment.is_active.is_(True),
        )
        if subject_id is not None:
            query = query.filter(TeacherAssignment.subject_id == subject_id)
        return query.first()

    def get_active_assignments_for_teacher(self, teacher_id: int) -> List[Dict[str, Any]]:
        """
        The teacher's scope: one dict per active (class, subject) assignment,
        carrying the names the statistics rows display.
        """
        rows = (
            self.db.query(TeacherAssignment, Class, Subject)
            .join(Class, Class.id == TeacherAssignment.class_id)
            .join(Subject, Subject.id == TeacherAssignment.subject_id)
            .filter(TeacherAssignment.teacher_id == teacher_id, TeacherAssignment.is_active.is_(True))
            .order_by(TeacherAssignment.id)
            .all()
        )
        return [
            {
                "class_id": cls.id,
                "class_name": cls.name,
                "class_code": cls.code,
                "subject_id": subject.id,
                "subject_name": subject.name,
                "academic_year": assignment.academic_year,
            }
            for assignment, cls, subject in rows
        ]

    def get_active_enrollment(self, student_id: int, class_id: int) -> Optional[ClassStudent]:
        return (
            self.db.query(ClassStudent)
            .filter(
                ClassStudent.student_id == student_id,
                ClassStudent.class_id == class_id,
                ClassStudent.status == "active",
            )
            .first()
        )

    def teacher_teaches_student(
        self,
        teacher_id: int,
        student_id: int,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> bool:
        """
        True when the teacher holds an active assignment on a class in which
        the student is actively enrolled, optionally narrowed to one class or
        subject.
        """
        query = (
            self.db.query(TeacherAssignment.id)
            .join(ClassStudent, ClassStudent.class_id == TeacherAssignment.class_id)
            .filter(
                TeacherAssignment.teacher_id == teacher_id,
                TeacherAssignment.is_active.is_(True),
                ClassStudent.student_id == student_id,
                ClassStudent.status == "active",
            )
        )
        if class_id is not None:
            query = query.filter(TeacherAssignment.class_id == class_id)
        if subject_id is not None:
            query = query.filter(TeacherAssignment.subject_id == subject_id)
        return query.first() is not None

    def get_users_by_ids(self, user_ids: List[int]) -> Dict[int, User]:
        if not user_ids:
            return {}
        users = self.db.query(User).filter(User.id.in_(user_ids)).all()
        return {u.id: u for u in users}

    # --- Creation (used by seeding and tests) ---

    def add_user(self, record: Dict) -> User:
        return self._add(User(**record))

    def add_class(self, record: Dict) -> Class:
        return self._add(Class(**record))

    def add_subject(self, record: Dict) -> Subject:
        return self._add(Subject(**record))

    def add_teacher_assignment(self, record: Dict) -> TeacherAssignment:
        return self._add(TeacherAssignment(**record))

    def add_enrollment(self, record: Dict) -> ClassStudent:
        return self._add(ClassStudent(**record))
