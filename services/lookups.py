from typing import Optional

from sqlalchemy.orm import Session

from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from utils.errors import NotFoundError


def get_student_for_user(db: Session, user_id: int) -> StudentModel:
    student = db.query(StudentModel).filter(StudentModel.user_id == user_id).first()
    if student is None:
        raise NotFoundError("Student not found")
    return student


def get_teacher_for_user(db: Session, user_id: int) -> TeacherModel:
    teacher = db.query(TeacherModel).filter(TeacherModel.user_id == user_id).first()
    if teacher is None:
        raise NotFoundError("Teacher not found")
    return teacher


def current_semester_id(db: Session) -> Optional[int]:
    row = (
        db.query(SemesterModel.id)
        .filter(SemesterModel.is_current.is_(True))
        .order_by(SemesterModel.start_date.desc())
        .first()
    )
    return row[0] if row else None


def resolve_semester_id(db: Session, semester_id: Optional[int]) -> Optional[int]:
    """Explicit semester wins, otherwise the current one (None when nothing is marked current)."""
    if semester_id is not None:
        return semester_id
    return current_semester_id(db)
