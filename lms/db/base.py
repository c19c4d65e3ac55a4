# /lms-backend/lms/db/base.py

# This file acts as a central registry for all our SQLAlchemy models.
# By importing them all here, we ensure that the Base class knows about them
# when Alembic runs its auto-generation scan.

from .base_class import Base

from .models.school_models import User, Class, Subject, TeacherAssignment, ClassStudent
from .models.grade_models import Grade
