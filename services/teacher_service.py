"""
services/teacher_service.py

Teacher side: timetable, rosters, score upload (weighted totals + makeup flag),
evaluation results, reschedule/substitute requests and makeup scores.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, aliased

from config.settings import settings
from models.classes import Class as ClassModel
from models.classrooms import Classroom as ClassroomModel
from models.courses import Course as CourseModel
from models.evaluations import Evaluation as EvaluationModel
from models.evaluations import EvaluationQuestion as QuestionModel
from models.grades import Grade as GradeModel
from models.requests import RescheduleRequest as RescheduleModel
from models.requests import SubstituteRequest as SubstituteModel
from models.schedules import Schedule as ScheduleModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from models.users import User as UserModel
from schemas.evaluations import EvaluationResult
from schemas.grades import MakeupCandidateOut, MakeupScoreIn, MakeupScoreOut, UploadGradesIn, UploadGradesOut
from schemas.requests import (
    RequestsOut, RescheduleRequestIn, RescheduleRequestOut, SubstituteRequestIn, SubstituteRequestOut,
)
from schemas.schedules import TeacherScheduleOut
from schemas.students import StudentOut
from services import approval, grade_store, grading
from services.lookups import current_semester_id, get_teacher_for_user, resolve_semester_id
from utils.errors import InvalidInputError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


def _own_schedule(db: Session, teacher_id: int, schedule_id: int) -> ScheduleModel:
    schedule = (
        db.query(ScheduleModel)
        .filter(ScheduleModel.id == schedule_id, ScheduleModel.teacher_id == teacher_id)
        .first()
    )
    if schedule is None:
        raise UnauthorizedError("This schedule does not belong to you")
    return schedule


# ==========================================================
# [schedule / roster]
# ==========================================================
def get_schedule(db: Session, user_id: int, semester_id: Optional[int] = None) -> List[TeacherScheduleOut]:
    teacher = get_teacher_for_user(db, user_id)
    semester_id = resolve_semester_id(db, semester_id)
    if semester_id is None:
        return []

    rows = (
        db.query(
            ScheduleModel.id, ScheduleModel.day_of_week, ScheduleModel.period_start, ScheduleModel.period_end,
            ScheduleModel.is_substitute, ScheduleModel.substitute_note,
            ScheduleModel.is_rescheduled, ScheduleModel.reschedule_note,
            CourseModel.name.label("course_name"), CourseModel.code.label("course_code"),
            ClassroomModel.room_number, ClassroomModel.building,
            ClassModel.name.label("class_name"), ClassModel.grade,
        )
        .select_from(ScheduleModel)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(ClassroomModel, ClassroomModel.id == ScheduleModel.classroom_id)
        .join(ClassModel, ClassModel.id == ScheduleModel.class_id)
        .filter(ScheduleModel.teacher_id == teacher.id, ScheduleModel.semester_id == semester_id)
        .order_by(ScheduleModel.day_of_week, ScheduleModel.period_start)
        .all()
    )
    return [TeacherScheduleOut.model_validate(r) for r in rows]


def get_class_students(db: Session, user_id: int, class_id: int) -> List[StudentOut]:
    teacher = get_teacher_for_user(db, user_id)
    semester_id = current_semester_id(db)

    teaches = (
        db.query(ScheduleModel.id)
        .filter(
            ScheduleModel.teacher_id == teacher.id,
            ScheduleModel.class_id == class_id,
            ScheduleModel.semester_id == semester_id,
        )
        .first()
    )
    if teaches is None:
        raise UnauthorizedError("You do not teach this class")

    rows = (
        db.query(
            StudentModel.id, StudentModel.student_number,
            UserModel.name, UserModel.email,
            ClassModel.name.label("class_name"), ClassModel.grade,
        )
        .select_from(StudentModel)
        .join(UserModel, UserModel.id == StudentModel.user_id)
        .join(ClassModel, ClassModel.id == StudentModel.class_id)
        .filter(StudentModel.class_id == class_id)
        .order_by(StudentModel.student_number)
        .all()
    )
    return [StudentOut.model_validate(r) for r in rows]


# ==========================================================
# [grades] upload component scores
# ==========================================================
def upload_grades(db: Session, user_id: int, payload: UploadGradesIn) -> UploadGradesOut:
    teacher = get_teacher_for_user(db, user_id)

    taught_classes = {
        row[0] for row in
        db.query(ScheduleModel.class_id)
        .filter(
            ScheduleModel.teacher_id == teacher.id,
            ScheduleModel.course_id == payload.course_id,
            ScheduleModel.semester_id == payload.semester_id,
        )
        .distinct()
        .all()
    }
    if not taught_classes:
        raise UnauthorizedError("You do not teach this course")

    course = grade_store.fetch_course(db, payload.course_id)
    has_midterm = bool(course.has_midterm_exam)

    student_ids = {g.student_id for g in payload.grades}
    classes = dict(db.query(StudentModel.id, StudentModel.class_id).filter(StudentModel.id.in_(student_ids)).all())
    missing = sorted(student_ids - classes.keys())
    if missing:
        raise NotFoundError(f"Student not found: {', '.join(str(s) for s in missing)}")

    # the caller must teach the student's class and own any existing record
    outside = sorted(s for s, c in classes.items() if c not in taught_classes)
    if outside:
        raise UnauthorizedError(f"You do not teach this course to student: {', '.join(str(s) for s in outside)}")
    for entry in payload.grades:
        existing = grade_store.fetch_grade(db, entry.student_id, payload.course_id, payload.semester_id)
        if existing is not None and existing.teacher_id != teacher.id:
            raise UnauthorizedError(f"Grade for student {entry.student_id} belongs to another teacher")

    grade_ids = []
    makeup_count = 0
    for entry in payload.grades:
        result = grading.aggregate(
            entry.regular_score, entry.midterm_score, entry.final_score,
            has_midterm=has_midterm,
            passing_score=settings.PASSING_SCORE,
        )
        grade_id = grade_store.upsert_grade(
            db,
            student_id=entry.student_id,
            course_id=payload.course_id,
            semester_id=payload.semester_id,
            teacher_id=teacher.id,
            regular_score=result.regular_score,
            midterm_score=result.midterm_score,
            final_score=result.final_score,
            total_score=result.total_score,
            needs_makeup=result.needs_makeup,
        )
        grade_ids.append(grade_id)
        makeup_count += int(result.needs_makeup)

    db.commit()
    logger.info(
        f"teacher {teacher.id} uploaded {len(grade_ids)} grades "
        f"(course={payload.course_id}, semester={payload.semester_id}, needs_makeup={makeup_count})"
    )
    return UploadGradesOut(grades_uploaded=len(grade_ids), needs_makeup=makeup_count, grade_ids=grade_ids)


# ==========================================================
# [evaluation] results for the teacher's course
# ==========================================================
def get_evaluation_results(db: Session, user_id: int, course_id: int, semester_id: int) -> List[EvaluationResult]:
    teacher = get_teacher_for_user(db, user_id)
    rows = (
        db.query(
            QuestionModel.id.label("question_id"),
            QuestionModel.question_text,
            QuestionModel.question_type,
            func.avg(EvaluationModel.rating_score).label("avg_rating"),
            func.count(EvaluationModel.id).label("response_count"),
        )
        .outerjoin(
            EvaluationModel,
            and_(
                EvaluationModel.question_id == QuestionModel.id,
                EvaluationModel.teacher_id == teacher.id,
                EvaluationModel.course_id == course_id,
                EvaluationModel.semester_id == semester_id,
            ),
        )
        .filter(QuestionModel.is_active.is_(True))
        .group_by(QuestionModel.id, QuestionModel.question_text, QuestionModel.question_type,
                  QuestionModel.order_number)
        .order_by(QuestionModel.order_number, QuestionModel.id)
        .all()
    )
    results = []
    for r in rows:
        avg = r.avg_rating if r.question_type == "rating" and r.avg_rating is not None else None
        results.append(EvaluationResult(
            question_id=r.question_id,
            question_text=r.question_text,
            question_type=r.question_type,
            avg_rating=round(float(avg), 2) if avg is not None else None,
            response_count=r.response_count,
        ))
    return results


# ==========================================================
# [requests] reschedule / substitute
# ==========================================================
def submit_reschedule_request(db: Session, user_id: int, payload: RescheduleRequestIn) -> int:
    teacher = get_teacher_for_user(db, user_id)
    _own_schedule(db, teacher.id, payload.schedule_id)

    if (payload.new_period_start is not None and payload.new_period_end is not None
            and payload.new_period_end < payload.new_period_start):
        raise InvalidInputError("newPeriodEnd must not be before newPeriodStart")
    if payload.new_classroom_id is not None:
        classroom = db.query(ClassroomModel.id).filter(ClassroomModel.id == payload.new_classroom_id).first()
        if classroom is None:
            raise NotFoundError(f"Classroom not found: {payload.new_classroom_id}")

    request = RescheduleModel(teacher_id=teacher.id, **payload.model_dump())
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"reschedule request {request.id} filed by teacher {teacher.id} for schedule {payload.schedule_id}")
    return request.id


def submit_substitute_request(db: Session, user_id: int, payload: SubstituteRequestIn) -> int:
    teacher = get_teacher_for_user(db, user_id)
    _own_schedule(db, teacher.id, payload.schedule_id)

    if payload.substitute_teacher_id == teacher.id:
        raise InvalidInputError("Substitute teacher must be someone else")
    substitute = db.query(TeacherModel.id).filter(TeacherModel.id == payload.substitute_teacher_id).first()
    if substitute is None:
        raise NotFoundError("Substitute teacher not found")

    request = SubstituteModel(
        schedule_id=payload.schedule_id,
        original_teacher_id=teacher.id,
        substitute_teacher_id=payload.substitute_teacher_id,
        reason=payload.reason,
        substitute_date=payload.substitute_date,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"substitute request {request.id} filed by teacher {teacher.id} for schedule {payload.schedule_id}")
    return request.id


def reschedule_requests_query(db: Session):
    """Reschedule requests joined with course/class/teacher names, newest first."""
    TeacherUser = aliased(UserModel)
    return (
        db.query(
            RescheduleModel.id, RescheduleModel.schedule_id, RescheduleModel.reason, RescheduleModel.request_type,
            RescheduleModel.original_date, RescheduleModel.new_date, RescheduleModel.new_day_of_week,
            RescheduleModel.new_period_start, RescheduleModel.new_period_end, RescheduleModel.new_classroom_id,
            RescheduleModel.status, RescheduleModel.admin_note,
            RescheduleModel.created_at, RescheduleModel.reviewed_at,
            CourseModel.name.label("course_name"),
            ClassModel.name.label("class_name"),
            TeacherUser.name.label("teacher_name"),
        )
        .select_from(RescheduleModel)
        .join(ScheduleModel, ScheduleModel.id == RescheduleModel.schedule_id)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(ClassModel, ClassModel.id == ScheduleModel.class_id)
        .join(TeacherModel, TeacherModel.id == RescheduleModel.teacher_id)
        .join(TeacherUser, TeacherUser.id == TeacherModel.user_id)
        .order_by(RescheduleModel.created_at.desc(), RescheduleModel.id.desc())
    )


def substitute_requests_query(db: Session):
    OriginalTeacher = aliased(TeacherModel)
    OriginalUser = aliased(UserModel)
    SubstituteTeacher = aliased(TeacherModel)
    SubstituteUser = aliased(UserModel)
    return (
        db.query(
            SubstituteModel.id, SubstituteModel.schedule_id, SubstituteModel.reason, SubstituteModel.substitute_date,
            SubstituteModel.status, SubstituteModel.admin_note,
            SubstituteModel.created_at, SubstituteModel.reviewed_at,
            SubstituteModel.original_teacher_id,
            CourseModel.name.label("course_name"),
            ClassModel.name.label("class_name"),
            OriginalUser.name.label("original_teacher_name"),
            SubstituteUser.name.label("substitute_teacher_name"),
        )
        .select_from(SubstituteModel)
        .join(ScheduleModel, ScheduleModel.id == SubstituteModel.schedule_id)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(ClassModel, ClassModel.id == ScheduleModel.class_id)
        .join(OriginalTeacher, OriginalTeacher.id == SubstituteModel.original_teacher_id)
        .join(OriginalUser, OriginalUser.id == OriginalTeacher.user_id)
        .join(SubstituteTeacher, SubstituteTeacher.id == SubstituteModel.substitute_teacher_id)
        .join(SubstituteUser, SubstituteUser.id == SubstituteTeacher.user_id)
        .order_by(SubstituteModel.created_at.desc(), SubstituteModel.id.desc())
    )


def get_teacher_requests(db: Session, user_id: int) -> RequestsOut:
    teacher = get_teacher_for_user(db, user_id)
    reschedules = reschedule_requests_query(db).filter(RescheduleModel.teacher_id == teacher.id).all()
    substitutes = substitute_requests_query(db).filter(SubstituteModel.original_teacher_id == teacher.id).all()
    return RequestsOut(
        reschedule_requests=[RescheduleRequestOut.model_validate(r) for r in reschedules],
        substitute_requests=[SubstituteRequestOut.model_validate(r) for r in substitutes],
    )


# ==========================================================
# [makeup] failing students + makeup scores
# ==========================================================
def get_students_needing_makeup(db: Session, user_id: int, course_id: int, semester_id: int) -> List[MakeupCandidateOut]:
    teacher = get_teacher_for_user(db, user_id)
    rows = (
        db.query(
            GradeModel.id.label("grade_id"), GradeModel.total_score, GradeModel.needs_makeup,
            GradeModel.makeup_approved, GradeModel.makeup_score, GradeModel.makeup_passed,
            GradeModel.makeup_approved_final,
            UserModel.name.label("student_name"), StudentModel.student_number,
            ClassModel.name.label("class_name"),
        )
        .select_from(GradeModel)
        .join(StudentModel, StudentModel.id == GradeModel.student_id)
        .join(UserModel, UserModel.id == StudentModel.user_id)
        .join(ClassModel, ClassModel.id == StudentModel.class_id)
        .filter(
            GradeModel.course_id == course_id,
            GradeModel.semester_id == semester_id,
            GradeModel.teacher_id == teacher.id,
            GradeModel.needs_makeup.is_(True),
        )
        .order_by(ClassModel.name, StudentModel.student_number)
        .all()
    )
    return [MakeupCandidateOut.model_validate(r) for r in rows]


def upload_makeup_score(db: Session, user_id: int, payload: MakeupScoreIn) -> MakeupScoreOut:
    teacher = get_teacher_for_user(db, user_id)
    grade = grade_store.get_grade(db, payload.grade_id)

    state = approval.apply_makeup_score(
        grade, teacher.id, payload.makeup_score, payload.makeup_passed,
        passing_score=settings.PASSING_SCORE,
    )
    db.commit()
    logger.info(f"makeup score for grade {grade.id} submitted by teacher {teacher.id}: {grade.makeup_score}")
    return MakeupScoreOut(
        grade_id=grade.id,
        makeup_score=grade.makeup_score,
        makeup_passed=grade.makeup_passed,
        state=state.value,
    )
