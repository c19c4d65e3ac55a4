# /lms-backend/lms/models/grade_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from ..services.grade_helpers.decimal_parsing import to_decimal

# --- Core Enumerations ---
class GradeType(str, Enum):
    HOMEWORK = "homework"; QUIZ = "quiz"; MIDTERM = "midterm"
    FINAL = "final"; ASSIGNMENT = "assignment"; PARTICIPATION = "participation"

class Term(str, Enum):
    FIRST = "1"
    SECOND = "2"
    FINAL = "final"  # End-of-year

ACADEMIC_YEAR_PATTERN = r"^\d{4}-\d{4}$"

# --- API Contract Models ---

class GradeBase(BaseModel):
    """
    Fields common to creating and reading a grade. Field names follow the
    database columns so that ORM rows validate directly. Stored values are
    read back as they are; the 0-10 scale is enforced on write only.
    """
    student_id: int = Field(..., description="The student who received the grade.")
    class_id: int = Field(..., description="The class the grade was recorded in.")
    subject_id: int = Field(..., description="The subject the grade belongs to.")
    grade_value: float = Field(..., description="The score, on the 0-10 scale.", examples=[8.5])
    grade_type: GradeType = Field(default=GradeType.HOMEWORK)
    weight: float = Field(default=1.0, description="Weight used by weighted averages (homework 1, quiz 1.5, midterm 2, final 3).")
    term: Term = Field(default=Term.FIRST)
    remarks: Optional[str] = Field(default=None, max_length=1000)

class GradeCreate(GradeBase):
    """
    The model used for recording a new grade. When `academic_year` is left
    out, the service fills in the current "YYYY-YYYY" label.
    """
    grade_value: float = Field(..., ge=0, le=10, description="The score, on the 0-10 scale.", examples=[8.5])
    weight: float = Field(default=1.0, ge=0, le=100)
    academic_year: Optional[str] = Field(default=None, pattern=ACADEMIC_YEAR_PATTERN, examples=["2024-2025"])

class GradeUpdate(BaseModel):
    """
    Only the score, its weight and the remarks can change after recording.
    The student, class, subject, type and term are the grade's identity.
    """
    grade_value: Optional[float] = Field(default=None, ge=0, le=10)
    weight: Optional[float] = Field(default=None, ge=0, le=100)
    remarks: Optional[str] = Field(default=None, max_length=1000)

class Grade(GradeBase):
    """
    The full representation of a Grade resource, as stored in the database
    and returned by the API.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    academic_year: str
    recorded_by: int
    recorded_at: Optional[datetime] = None

    # Numeric columns come back as Decimal; normalise them the same way the
    # statistics engine does.
    @field_validator('grade_value', 'weight', mode='before')
    @classmethod
    def normalise_decimal(cls, v):
        return to_decimal(v)

class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalItems: int
    itemsPerPage: int

class GradeList(BaseModel):
    """Defines the data contract for the paginated GET /api/grades response."""
    items: List[Grade]
    pagination: Pagination
