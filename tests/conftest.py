# /tests/conftest.py

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms.db import base  # noqa: F401  (registers every model on Base)
from lms.db.base_class import Base
from lms.services.database_service import DatabaseService


@pytest.fixture
def db_session():
    """
    A fresh in-memory SQLite database for EACH test function. StaticPool keeps
    the single connection alive so the TestClient's worker thread sees the
    same tables.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_service(db_session):
    return DatabaseService(db_session=db_session)


@pytest.fixture
def school(db_service):
    """
    Seeds a small school: one admin, two teachers, two students, one class,
    two subjects. Teacher 1 teaches Math in 10A1; teacher 2 has no assignments.
    """
    admin = db_service.add_user({"name": "Admin", "email": "admin@school.test", "role": "admin"})
    teacher = db_service.add_user({"name": "Ms. Lan", "email": "lan@school.test", "role": "teacher"})
    idle_teacher = db_service.add_user({"name": "Mr. Binh", "email": "binh@school.test", "role": "teacher"})
    alice = db_service.add_user({"name": "Alice", "email": "alice@school.test", "role": "student"})
    bob = db_service.add_user({"name": "Bob", "email": "bob@school.test", "role": "student"})

    cls = db_service.add_class({"name": "10A1", "code": "10A1"})
    math = db_service.add_subject({"name": "Math", "code": "MATH"})
    physics = db_service.add_subject({"name": "Physics", "code": "PHYS"})

    db_service.add_teacher_assignment({
        "teacher_id": teacher.id, "class_id": cls.id, "subject_id": math.id, "academic_year": "2024-2025",
    })
    db_service.add_enrollment({"class_id": cls.id, "student_id": alice.id})
    db_service.add_enrollment({"class_id": cls.id, "student_id": bob.id})

    return {
        "admin": admin, "teacher": teacher, "idle_teacher": idle_teacher,
        "alice": alice, "bob": bob, "class": cls, "math": math, "physics": physics,
    }
