# /lms-backend/lms/db/base_class.py

# The single declarative Base shared by every ORM model in the project.
# Models import it from here (not from `database.py`) so that the model
# modules can be loaded without creating an engine.

from sqlalchemy.orm import declarative_base

Base = declarative_base()
