# /lms-backend/lms/db/models/school_models.py

"""
This module defines the SQLAlchemy ORM models for the school roster:
users, classes, subjects, the teacher-to-(class, subject) assignments and the
student enrollments.

These tables are owned by the administrative CRUD screens. The grade
statistics only read them to resolve a teacher's scope and to attach
human-readable class and subject names to grade records.
"""

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ..base_class import Base


class User(Base):
    """
    A person in the system. The `role` column decides which dashboard the
    user sees: "admin", "teacher" or "student".
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    code = Column(String, unique=True, nullable=True)
    role = Column(String, nullable=False, default="student")
    is_active = Column(Boolean, nullable=False, default=True)

    teaching_assignments = relationship("TeacherAssignment", back_populates="teacher")
    enrollments = relationship("ClassStudent", back_populates="student")


class Class(Base):
    """
    SQLAlchemy model representing a homeroom class (e.g. "10A1").
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    code = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)

    # When a Class is deleted, its roster and teaching assignments go with it.
    students = relationship("ClassStudent", back_populates="class_", cascade="all, delete-orphan")
    assignments = relationship("TeacherAssignment", back_populates="class_", cascade="all, delete-orphan")


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    code = Column(String, unique=True, nullable=False)


class TeacherAssignment(Base):
    """
    One row means "this teacher teaches this subject in this class".
    The set of active rows for a teacher is the scope of the teacher-side
    grade statistics.
    """
    __tablename__ = "teacher_assignments"
    __table_args__ = (
        UniqueConstraint("teacher_id", "class_id", "subject_id", name="uq_teacher_class_subject"),
    )

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    academic_year = Column(String(9), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    teacher = relationship("User", back_populates="teaching_assignments")
    class_ = relationship("Class", back_populates="assignments")
    subject = relationship("Subject")


class ClassStudent(Base):
    """
    The enrollment of a student in a class. Only "active" enrollments allow
    new grades to be recorded.
    """
    __tablename__ = "class_students"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_class_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="active")

    class_ = relationship("Class", back_populates="students")
    student = relationship("User", back_populates="enrollments")
