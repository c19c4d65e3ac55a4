# /lms-backend/lms/db/models/grade_models.py

"""
This module defines the SQLAlchemy ORM model for the `Grade` entity: one
scored event for one student in one class, subject, term and academic year.

Grades are soft-deleted (`is_active = False`) so that historical reports can
still be reconstructed; every read in the repository filters on `is_active`.
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base


class Grade(Base):
    __tablename__ = "grades"
    __table_args__ = (
        Index("idx_grade_lookup", "student_id", "subject_id", "class_id", "term", "academic_year"),
        Index("idx_class_subject_term", "class_id", "subject_id", "term"),
        Index("idx_student_term_year", "student_id", "term", "academic_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)

    # Stored as exact decimals; the statistics engine normalises them to floats.
    grade_value = Column(Numeric(4, 2), nullable=False)
    grade_type = Column(String, nullable=False, default="homework")
    # Typical weights: homework 1, quiz 1.5, midterm 2, final 3.
    weight = Column(Numeric(5, 2), nullable=False, default=1.0)
    term = Column(String, nullable=False, default="1")
    academic_year = Column(String(9), nullable=False)
    remarks = Column(Text, nullable=True)

    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    is_active = Column(Boolean, nullable=False, default=True)

    student = relationship("User", foreign_keys=[student_id])
    recorder = relationship("User", foreign_keys=[recorded_by])
    class_ = relationship("Class")
    subject = relationship("Subject")
