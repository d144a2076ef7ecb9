"""
services/grade_store.py

Row-level reads/writes the grading core depends on. Commits are left to the caller.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, distinct, func
from sqlalchemy.orm import Session

from models.courses import Course as CourseModel
from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.users import User as UserModel
from services.approval import APPROVAL_FIELDS
from services.grading import CohortEntry
from utils.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def get_grade(db: Session, grade_id: int) -> GradeModel:
    grade = db.query(GradeModel).filter(GradeModel.id == grade_id).first()
    if grade is None:
        raise NotFoundError("Grade not found")
    return grade


def fetch_grade(db: Session, student_id: int, course_id: int, semester_id: int) -> Optional[GradeModel]:
    return (
        db.query(GradeModel)
        .filter(
            GradeModel.student_id == student_id,
            GradeModel.course_id == course_id,
            GradeModel.semester_id == semester_id,
        )
        .first()
    )


def upsert_grade(db: Session, *, student_id: int, course_id: int, semester_id: int, teacher_id: int,
                 regular_score: float, midterm_score: Optional[float], final_score: float,
                 total_score: float, needs_makeup: bool) -> int:
    """Insert or overwrite the (student, course, semester) grade. Returns the grade id."""
    grade = fetch_grade(db, student_id, course_id, semester_id)
    if grade is None:
        grade = GradeModel(
            student_id=student_id,
            course_id=course_id,
            semester_id=semester_id,
            teacher_id=teacher_id,
        )
        db.add(grade)

    grade.regular_score = regular_score
    grade.midterm_score = midterm_score
    grade.final_score = final_score
    grade.total_score = total_score
    grade.needs_makeup = needs_makeup
    db.flush()
    return grade.id


def fetch_course(db: Session, course_id: int) -> CourseModel:
    course = db.query(CourseModel).filter(CourseModel.id == course_id).first()
    if course is None:
        raise NotFoundError("Course not found")
    return course


def fetch_cohort_averages(db: Session, grade: int, semester_id: int) -> List[CohortEntry]:
    """
    Every student of the year level with their semester average.
    Students without grades in the semester are kept with average 0.
    """
    rows = (
        db.query(
            StudentModel.id.label("student_id"),
            StudentModel.student_number,
            UserModel.name,
            func.coalesce(func.avg(GradeModel.total_score), 0).label("avg_score"),
            func.count(distinct(GradeModel.course_id)).label("course_count"),
        )
        .join(UserModel, UserModel.id == StudentModel.user_id)
        .outerjoin(
            GradeModel,
            and_(GradeModel.student_id == StudentModel.id, GradeModel.semester_id == semester_id),
        )
        .filter(StudentModel.grade == grade)
        .group_by(StudentModel.id, StudentModel.student_number, UserModel.name)
        .all()
    )
    return [
        CohortEntry(
            student_id=r.student_id,
            avg_score=float(r.avg_score or 0),
            course_count=int(r.course_count or 0),
            name=r.name,
            student_number=r.student_number,
        )
        for r in rows
    ]


def update_approval_flag(db: Session, grade_id: int, field: str, value: Optional[bool]) -> GradeModel:
    if field not in APPROVAL_FIELDS:
        raise InvalidInputError(f"Unknown approval field: {field}")
    grade = get_grade(db, grade_id)
    setattr(grade, field, value)
    db.flush()
    logger.info(f"grade {grade_id}: {field} -> {value}")
    return grade
