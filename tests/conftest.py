"""Shared fixtures: in-memory SQLite per test, a small seeded school and role tokens."""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("REQUEST_LOG_JSON", "false")

from dataclasses import dataclass
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from database.schema import create_all
from main import app
from models.classes import Class as ClassModel
from models.classrooms import Classroom as ClassroomModel
from models.courses import Course as CourseModel
from models.schedules import Schedule as ScheduleModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from models.users import User as UserModel
from utils.security import create_access_token, hash_password

PASSWORD = "password123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def add_user(db, username: str, role: str, name: str) -> UserModel:
    user = UserModel(username=username, password_hash=hash_password(PASSWORD), role=role, name=name,
                     email=f"{username}@school.test")
    db.add(user)
    db.flush()
    return user


def add_student(db, username: str, name: str, student_number: str, class_id: int, grade: int) -> StudentModel:
    user = add_user(db, username, "student", name)
    student = StudentModel(user_id=user.id, student_number=student_number, class_id=class_id, grade=grade)
    db.add(student)
    db.flush()
    return student


def auth_header(user: UserModel) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username, user.role)}"}


@dataclass
class School:
    admin: UserModel
    teacher_user: UserModel
    teacher: TeacherModel
    other_teacher_user: UserModel
    other_teacher: TeacherModel
    student_user: UserModel
    student: StudentModel
    classmate: StudentModel
    school_class: ClassModel
    other_class: ClassModel
    classroom: ClassroomModel
    course: CourseModel
    course_no_midterm: CourseModel
    semester: SemesterModel
    schedule: ScheduleModel
    schedule_no_midterm: ScheduleModel

    @property
    def admin_headers(self):
        return auth_header(self.admin)

    @property
    def teacher_headers(self):
        return auth_header(self.teacher_user)

    @property
    def other_teacher_headers(self):
        return auth_header(self.other_teacher_user)

    @property
    def student_headers(self):
        return auth_header(self.student_user)


@pytest.fixture
def school(db) -> School:
    admin = add_user(db, "admin", "admin", "Admin")

    teacher_user = add_user(db, "kim", "teacher", "Kim Teacher")
    teacher = TeacherModel(user_id=teacher_user.id, teacher_number="T001", department="Math")
    other_teacher_user = add_user(db, "lee", "teacher", "Lee Teacher")
    other_teacher = TeacherModel(user_id=other_teacher_user.id, teacher_number="T002", department="English")
    db.add_all([teacher, other_teacher])

    school_class = ClassModel(grade=3, class_number=1, name="Grade 3 Class 1")
    other_class = ClassModel(grade=3, class_number=2, name="Grade 3 Class 2")
    classroom = ClassroomModel(room_number="301", building="Main", capacity=30)
    course = CourseModel(name="Mathematics", code="MATH3", credits=3, has_midterm_exam=True)
    course_no_midterm = CourseModel(name="Art", code="ART3", credits=1, has_midterm_exam=False)
    semester = SemesterModel(name="2026 Fall", start_date=date(2026, 9, 1), end_date=date(2027, 2, 28),
                             is_current=True)
    db.add_all([school_class, other_class, classroom, course, course_no_midterm, semester])
    db.flush()

    student = add_student(db, "minji", "Minji", "S001", school_class.id, 3)
    student_user = db.get(UserModel, student.user_id)
    classmate = add_student(db, "jisoo", "Jisoo", "S002", school_class.id, 3)

    schedule = ScheduleModel(course_id=course.id, teacher_id=teacher.id, class_id=school_class.id,
                             classroom_id=classroom.id, semester_id=semester.id,
                             day_of_week=1, period_start=1, period_end=2)
    schedule_no_midterm = ScheduleModel(course_id=course_no_midterm.id, teacher_id=teacher.id,
                                        class_id=school_class.id, classroom_id=classroom.id,
                                        semester_id=semester.id, day_of_week=2, period_start=3, period_end=3)
    db.add_all([schedule, schedule_no_midterm])
    db.commit()

    return School(
        admin=admin, teacher_user=teacher_user, teacher=teacher,
        other_teacher_user=other_teacher_user, other_teacher=other_teacher,
        student_user=student_user, student=student, classmate=classmate,
        school_class=school_class, other_class=other_class, classroom=classroom,
        course=course, course_no_midterm=course_no_midterm, semester=semester,
        schedule=schedule, schedule_no_midterm=schedule_no_midterm,
    )
