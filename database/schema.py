"""
database/schema.py

Imports every model module so Base.metadata knows all tables, then creates them.
Used by app startup, scripts/init_db.py and the test fixtures.
"""

from database.db import Base, engine

# registers the tables on Base.metadata
from models import (  # noqa: F401
    users, students, teachers, classes, classrooms, courses,
    semesters, schedules, grades, evaluations, requests,
)


def create_all(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def drop_all(bind=None):
    Base.metadata.drop_all(bind=bind or engine)
