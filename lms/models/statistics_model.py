# /lms-backend/lms/models/statistics_model.py

"""
Data contracts for the grade statistics views. The shapes mirror what
the aggregation engine in `services/grade_helpers` returns; the models exist
so that the routers can declare a `response_model` and FastAPI validates the
payload before it leaves the server.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union

from .grade_model import Grade, Pagination

# "--" when there are no grades to average.
HeadlineAverage = Union[float, str]


# --- Student view ---

class SubjectStats(BaseModel):
    average: float
    weightedAverage: float
    count: int
    highest: float = Field(..., description="Highest grade in the group, unrounded.")
    lowest: float = Field(..., description="Lowest grade in the group, unrounded.")

class YearRollup(BaseModel):
    average: float
    weightedAverage: float
    count: int

class YearBreakdown(BaseModel):
    perSubject: Dict[str, SubjectStats]
    rollup: YearRollup

class StudentGradeStatistics(BaseModel):
    """
    Defines the data contract for a student's grade page: a breakdown per
    academic year and subject, plus two headline averages that always cover
    every grade the student has.
    """
    studentId: int
    term: Optional[str] = Field(default=None, description="The term filter applied to `perYear`, if any.")
    perYear: Dict[str, YearBreakdown]
    overallAverage: HeadlineAverage = Field(..., examples=[7.85, "--"])
    currentYearAverage: HeadlineAverage = Field(..., examples=[8.1, "--"])
    recentGrades: List[Grade] = Field(default_factory=list)


# --- Teacher view ---

class ClassSubjectStats(BaseModel):
    """Distribution statistics for one (class, subject) teaching assignment."""
    classId: int
    className: Optional[str] = None
    classCode: Optional[str] = None
    subjectId: int
    subjectName: Optional[str] = None
    totalStudents: int = Field(..., description="Distinct students with at least one grade in the group.")
    averageGrade: float
    excellentCount: int = Field(..., description="Grades >= 9.")
    goodCount: int = Field(..., description="Grades in [8, 9).")
    averageCount: int = Field(..., description="Grades in [7, 8).")
    belowAverageCount: int = Field(..., description="Grades < 7.")
    passRate: float = Field(..., description="Percentage of grades >= 5, one decimal.")

class TeacherStatisticsSummary(BaseModel):
    totalClasses: int
    totalSubjects: int
    totalStudents: int
    overallAvgGrade: float
    classesWithGrades: int

class StatisticsFilters(BaseModel):
    academicYear: Optional[str] = None
    term: Optional[str] = None
    gradeType: Optional[str] = None

class TeacherGradeStatistics(BaseModel):
    """
    Defines the data contract for the teacher's "grades across my classes"
    dashboard.
    """
    teacherId: int
    filters: StatisticsFilters
    perGroup: List[ClassSubjectStats]
    summary: TeacherStatisticsSummary


# --- Class report view ---

class ReportDistribution(BaseModel):
    excellent: int
    good: int
    fair: int
    average: int
    poor: int

class SubjectReport(BaseModel):
    subjectId: Optional[int] = None
    subjectName: str
    averageGrade: float
    minGrade: float
    maxGrade: float
    totalGrades: int
    passingGrades: int
    passRate: float
    distribution: ReportDistribution

class ClassGradeReport(BaseModel):
    classId: int
    className: str
    filters: StatisticsFilters
    subjects: List[SubjectReport]


# --- Administrative dashboard ---

class TypeStats(BaseModel):
    count: int
    average: float = Field(..., description="Weighted average, 0 when the type has no grades.")
    min: float
    max: float

class TermStats(BaseModel):
    count: int
    average: float = Field(..., description="Mean of the per-class weighted averages above zero.")

class ClassAverage(BaseModel):
    classId: Optional[int] = None
    className: Optional[str] = None
    classCode: Optional[str] = None
    count: int
    average: float

class SchoolOverall(BaseModel):
    totalGrades: int
    average: float

class SchoolGradeStatistics(BaseModel):
    """
    Defines the data contract for the school-wide grade overview on the
    administrator's dashboard.
    """
    filters: StatisticsFilters
    overall: SchoolOverall
    byType: Dict[str, TypeStats]
    byTerm: Dict[str, TermStats]
    byClass: List[ClassAverage]

class StudentClassStats(BaseModel):
    studentId: int
    studentName: Optional[str] = None
    studentCode: Optional[str] = None
    gradeCount: int
    averages: Dict[str, float] = Field(..., description="Weighted average per grade type, plus 'overall'.")

class ClassOverall(BaseModel):
    totalGrades: int
    totalStudents: int
    average: float
    min: float
    max: float

class DashboardDistribution(BaseModel):
    excellent: int = Field(..., description="Grades >= 9.")
    good: int = Field(..., description="Grades in [7, 9).")
    average: int = Field(..., description="Grades in [5, 7).")
    below: int = Field(..., description="Grades < 5.")

class ClassStudentStatistics(BaseModel):
    classId: int
    className: str
    classCode: Optional[str] = None
    filters: StatisticsFilters
    overall: ClassOverall
    distribution: DashboardDistribution
    studentStats: List[StudentClassStats]


# --- Student grade list ---

class SubjectTermAverage(BaseModel):
    subjectId: Optional[int] = None
    subjectName: str
    term: Optional[str] = None
    averageGrade: float
    totalGrades: int

class StudentGradeList(BaseModel):
    """One page of a student's grades plus their weighted averages per subject and term."""
    studentId: int
    items: List[Grade]
    averages: List[SubjectTermAverage]
    pagination: Pagination
