"""
services/master_data_service.py

Accounts and the school's master data: users, courses, classes, classrooms,
timetable slots and semesters.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import settings
from models.classes import Class as ClassModel
from models.classrooms import Classroom as ClassroomModel
from models.courses import Course as CourseModel
from models.grades import Grade as GradeModel
from models.schedules import Schedule as ScheduleModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from models.users import User as UserModel
from schemas.classes import Class, ClassCreate
from schemas.classrooms import Classroom, ClassroomCreate
from schemas.courses import Course, CourseCreate, CourseSettingsOut
from schemas.schedules import ScheduleCreate, ScheduleOut
from schemas.semesters import Semester, SemesterCreate
from schemas.teachers import TeacherOut
from schemas.users import BatchResult, BatchStudentsIn, StudentInfo, TeacherInfo, UserCreate
from services.grade_store import fetch_course
from utils.errors import ConflictError, NotFoundError
from utils.security import hash_password

logger = logging.getLogger(__name__)


# ==========================================================
# [users] accounts + role profiles
# ==========================================================
def _ensure_username_free(db: Session, username: str) -> None:
    if db.query(UserModel.id).filter(UserModel.username == username).first() is not None:
        raise ConflictError(f"Username already exists: {username}")


def _ensure_class_exists(db: Session, class_id: int) -> None:
    if db.query(ClassModel.id).filter(ClassModel.id == class_id).first() is None:
        raise NotFoundError(f"Class not found: {class_id}")


def _add_user(db: Session, username: str, password: str, role: str, name: str,
              email: Optional[str]) -> UserModel:
    user = UserModel(
        username=username,
        password_hash=hash_password(password),
        role=role,
        name=name,
        email=email,
    )
    db.add(user)
    db.flush()
    return user


def _add_student_profile(db: Session, user_id: int, info: StudentInfo) -> None:
    if db.query(StudentModel.id).filter(StudentModel.student_number == info.student_number).first():
        raise ConflictError(f"Student number already exists: {info.student_number}")
    _ensure_class_exists(db, info.class_id)
    db.add(StudentModel(
        user_id=user_id,
        student_number=info.student_number,
        class_id=info.class_id,
        grade=info.grade,
    ))


def _add_teacher_profile(db: Session, user_id: int, info: TeacherInfo) -> None:
    if db.query(TeacherModel.id).filter(TeacherModel.teacher_number == info.teacher_number).first():
        raise ConflictError(f"Teacher number already exists: {info.teacher_number}")
    db.add(TeacherModel(
        user_id=user_id,
        teacher_number=info.teacher_number,
        department=info.department,
        title=info.title,
    ))


def create_user(db: Session, payload: UserCreate) -> int:
    """Creates the login account and, for students and teachers, the profile row in one transaction."""
    _ensure_username_free(db, payload.username)
    try:
        user = _add_user(db, payload.username, payload.password, payload.role, payload.name, payload.email)
        if payload.role == "student":
            _add_student_profile(db, user.id, StudentInfo.model_validate(payload.additional_info))
        elif payload.role == "teacher":
            _add_teacher_profile(db, user.id, TeacherInfo.model_validate(payload.additional_info))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User conflicts with existing data")
    except Exception:
        db.rollback()
        raise

    logger.info(f"user created: {user.username} ({user.role})")
    return user.id


def batch_create_students(db: Session, payload: BatchStudentsIn) -> List[BatchResult]:
    """Each row is committed on its own; a bad row is reported and does not stop the batch."""
    results = []
    for row in payload.students:
        try:
            _ensure_username_free(db, row.username)
            user = _add_user(db, row.username, row.password, "student", row.name, row.email)
            _add_student_profile(db, user.id, StudentInfo(
                student_number=row.student_number, class_id=row.class_id, grade=row.grade,
            ))
            db.commit()
            results.append(BatchResult(success=True, username=row.username, user_id=user.id))
        except (ConflictError, NotFoundError) as e:
            db.rollback()
            results.append(BatchResult(success=False, username=row.username, error=e.message))
        except IntegrityError as e:
            db.rollback()
            results.append(BatchResult(success=False, username=row.username, error=str(e.orig)))

    created = sum(1 for r in results if r.success)
    logger.info(f"batch student import: {created}/{len(results)} created")
    return results


def ensure_default_admin(db: Session) -> bool:
    """Seeds the configured admin account when no admin exists yet. Returns True if one was created."""
    if db.query(UserModel.id).filter(UserModel.role == "admin").first() is not None:
        return False
    _add_user(
        db,
        settings.DEFAULT_ADMIN_USERNAME,
        settings.DEFAULT_ADMIN_PASSWORD,
        "admin",
        settings.DEFAULT_ADMIN_NAME,
        None,
    )
    db.commit()
    logger.warning(f"default admin '{settings.DEFAULT_ADMIN_USERNAME}' created; change its password")
    return True


# ==========================================================
# [courses]
# ==========================================================
def list_courses(db: Session) -> List[Course]:
    return [Course.model_validate(c) for c in db.query(CourseModel).order_by(CourseModel.code).all()]


def create_course(db: Session, payload: CourseCreate) -> int:
    if db.query(CourseModel.id).filter(CourseModel.code == payload.code).first() is not None:
        raise ConflictError(f"Course code already exists: {payload.code}")
    course = CourseModel(**payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course.id


def update_course_settings(db: Session, course_id: int, has_midterm_exam: bool) -> CourseSettingsOut:
    course = fetch_course(db, course_id)
    course.has_midterm_exam = has_midterm_exam

    # totals already stored were computed under the previous policy
    if has_midterm_exam:
        stale = GradeModel.midterm_score.is_(None)
    else:
        stale = GradeModel.midterm_score.isnot(None)
    stale_grades = (
        db.query(func.count(GradeModel.id))
        .filter(GradeModel.course_id == course_id, stale)
        .scalar()
    ) or 0

    db.commit()
    if stale_grades:
        logger.warning(
            f"course {course_id} midterm policy set to {has_midterm_exam}; "
            f"{stale_grades} stored grades keep their previous totals until re-uploaded"
        )
    return CourseSettingsOut(course_id=course_id, has_midterm_exam=has_midterm_exam, stale_grades=stale_grades)


# ==========================================================
# [teachers]
# ==========================================================
def list_teachers(db: Session) -> List[TeacherOut]:
    rows = (
        db.query(
            TeacherModel.id, TeacherModel.user_id, TeacherModel.teacher_number,
            TeacherModel.department, TeacherModel.title,
            UserModel.name, UserModel.email,
        )
        .join(UserModel, UserModel.id == TeacherModel.user_id)
        .order_by(TeacherModel.teacher_number)
        .all()
    )
    return [TeacherOut.model_validate(r) for r in rows]


# ==========================================================
# [classes / classrooms]
# ==========================================================
def list_classes(db: Session) -> List[Class]:
    rows = db.query(ClassModel).order_by(ClassModel.grade, ClassModel.class_number).all()
    return [Class.model_validate(r) for r in rows]


def create_class(db: Session, payload: ClassCreate) -> int:
    duplicate = (
        db.query(ClassModel.id)
        .filter(ClassModel.grade == payload.grade, ClassModel.class_number == payload.class_number)
        .first()
    )
    if duplicate is not None:
        raise ConflictError(f"Class already exists: grade {payload.grade} class {payload.class_number}")
    if payload.head_teacher_id is not None:
        if db.query(TeacherModel.id).filter(TeacherModel.id == payload.head_teacher_id).first() is None:
            raise NotFoundError("Head teacher not found")

    record = ClassModel(
        grade=payload.grade,
        class_number=payload.class_number,
        name=payload.name or f"Grade {payload.grade} Class {payload.class_number}",
        head_teacher_id=payload.head_teacher_id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record.id


def list_classrooms(db: Session) -> List[Classroom]:
    rows = db.query(ClassroomModel).order_by(ClassroomModel.building, ClassroomModel.room_number).all()
    return [Classroom.model_validate(r) for r in rows]


def create_classroom(db: Session, payload: ClassroomCreate) -> int:
    if db.query(ClassroomModel.id).filter(ClassroomModel.room_number == payload.room_number).first():
        raise ConflictError(f"Classroom already exists: {payload.room_number}")
    room = ClassroomModel(**payload.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    return room.id


# ==========================================================
# [schedules]
# ==========================================================
def find_classroom_overlap(db: Session, *, semester_id: int, classroom_id: int, day_of_week: int,
                           period_start: int, period_end: int, exclude_id: Optional[int] = None):
    """Id of a slot already holding the classroom in that day and period range, if any."""
    query = (
        db.query(ScheduleModel.id)
        .filter(
            ScheduleModel.semester_id == semester_id,
            ScheduleModel.classroom_id == classroom_id,
            ScheduleModel.day_of_week == day_of_week,
            ScheduleModel.period_start <= period_end,
            ScheduleModel.period_end >= period_start,
        )
    )
    if exclude_id is not None:
        query = query.filter(ScheduleModel.id != exclude_id)
    row = query.first()
    return row[0] if row else None


def create_schedule(db: Session, payload: ScheduleCreate) -> int:
    references = [
        (CourseModel, payload.course_id, "Course"),
        (TeacherModel, payload.teacher_id, "Teacher"),
        (ClassModel, payload.class_id, "Class"),
        (ClassroomModel, payload.classroom_id, "Classroom"),
        (SemesterModel, payload.semester_id, "Semester"),
    ]
    for model, ref_id, label in references:
        if db.query(model.id).filter(model.id == ref_id).first() is None:
            raise NotFoundError(f"{label} not found: {ref_id}")

    if find_classroom_overlap(
        db, semester_id=payload.semester_id, classroom_id=payload.classroom_id,
        day_of_week=payload.day_of_week, period_start=payload.period_start, period_end=payload.period_end,
    ):
        raise ConflictError("Classroom is already booked for that time slot")

    slot = ScheduleModel(**payload.model_dump())
    db.add(slot)
    db.commit()
    db.refresh(slot)
    logger.info(
        f"schedule {slot.id} created: class={slot.class_id} day={slot.day_of_week} "
        f"periods={slot.period_start}-{slot.period_end}"
    )
    return slot.id


def list_schedules(db: Session, semester_id: Optional[int] = None,
                   class_id: Optional[int] = None) -> List[ScheduleOut]:
    query = (
        db.query(
            ScheduleModel.id, ScheduleModel.course_id, ScheduleModel.teacher_id, ScheduleModel.class_id,
            ScheduleModel.classroom_id, ScheduleModel.semester_id,
            ScheduleModel.day_of_week, ScheduleModel.period_start, ScheduleModel.period_end,
            ScheduleModel.is_substitute, ScheduleModel.is_rescheduled,
            CourseModel.name.label("course_name"), CourseModel.code.label("course_code"),
            TeacherModel.teacher_number, UserModel.name.label("teacher_name"),
            ClassModel.name.label("class_name"),
            ClassroomModel.room_number, ClassroomModel.building,
        )
        .select_from(ScheduleModel)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(TeacherModel, TeacherModel.id == ScheduleModel.teacher_id)
        .join(UserModel, UserModel.id == TeacherModel.user_id)
        .join(ClassModel, ClassModel.id == ScheduleModel.class_id)
        .join(ClassroomModel, ClassroomModel.id == ScheduleModel.classroom_id)
    )
    if semester_id is not None:
        query = query.filter(ScheduleModel.semester_id == semester_id)
    if class_id is not None:
        query = query.filter(ScheduleModel.class_id == class_id)
    rows = query.order_by(ClassModel.name, ScheduleModel.day_of_week, ScheduleModel.period_start).all()
    return [ScheduleOut.model_validate(r) for r in rows]


def delete_schedule(db: Session, schedule_id: int) -> None:
    slot = db.query(ScheduleModel).filter(ScheduleModel.id == schedule_id).first()
    if slot is None:
        raise NotFoundError("Schedule not found")
    db.delete(slot)
    db.commit()


# ==========================================================
# [semesters]
# ==========================================================
def list_semesters(db: Session) -> List[Semester]:
    rows = db.query(SemesterModel).order_by(SemesterModel.start_date.desc()).all()
    return [Semester.model_validate(r) for r in rows]


def create_semester(db: Session, payload: SemesterCreate) -> int:
    if payload.is_current:
        # at most one current semester
        db.query(SemesterModel).filter(SemesterModel.is_current.is_(True)).update(
            {SemesterModel.is_current: False}, synchronize_session=False
        )
    semester = SemesterModel(**payload.model_dump())
    db.add(semester)
    db.commit()
    db.refresh(semester)
    return semester.id
