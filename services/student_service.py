"""
services/student_service.py

Read models for the student dashboard plus course evaluation submission.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import and_, exists
from sqlalchemy.orm import Session, aliased

from config.settings import settings
from models.classrooms import Classroom as ClassroomModel
from models.courses import Course as CourseModel
from models.evaluations import Evaluation as EvaluationModel
from models.evaluations import EvaluationPeriod as PeriodModel
from models.evaluations import EvaluationQuestion as QuestionModel
from models.grades import Grade as GradeModel
from models.schedules import Schedule as ScheduleModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from models.users import User as UserModel
from schemas.evaluations import EvaluationCourse, EvaluationSubmit, Question
from schemas.grades import GradeTrendPoint, RankingOut, StudentGradeOut
from schemas.schedules import StudentScheduleOut
from services import grade_store, grading
from services.lookups import get_student_for_user, resolve_semester_id
from utils.errors import ConflictError, InvalidInputError, UnauthorizedError

logger = logging.getLogger(__name__)

DEFAULT_RANKING_SEMESTER = 1


def _utc_now() -> datetime:
    # periods are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ==========================================================
# [schedule / grades]
# ==========================================================
def get_schedule(db: Session, user_id: int, semester_id: Optional[int] = None) -> List[StudentScheduleOut]:
    semester_id = resolve_semester_id(db, semester_id)
    if semester_id is None:
        return []

    TeacherUser = aliased(UserModel)
    rows = (
        db.query(
            ScheduleModel.id, ScheduleModel.day_of_week, ScheduleModel.period_start, ScheduleModel.period_end,
            ScheduleModel.is_substitute, ScheduleModel.substitute_note,
            ScheduleModel.is_rescheduled, ScheduleModel.reschedule_note,
            CourseModel.name.label("course_name"), CourseModel.code.label("course_code"),
            ClassroomModel.room_number, ClassroomModel.building,
            TeacherUser.name.label("teacher_name"),
        )
        .select_from(ScheduleModel)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(ClassroomModel, ClassroomModel.id == ScheduleModel.classroom_id)
        .join(TeacherModel, TeacherModel.id == ScheduleModel.teacher_id)
        .join(TeacherUser, TeacherUser.id == TeacherModel.user_id)
        .join(StudentModel, StudentModel.class_id == ScheduleModel.class_id)
        .filter(StudentModel.user_id == user_id, ScheduleModel.semester_id == semester_id)
        .order_by(ScheduleModel.day_of_week, ScheduleModel.period_start)
        .all()
    )
    return [StudentScheduleOut.model_validate(r) for r in rows]


def get_grades(db: Session, user_id: int, semester_id: Optional[int] = None) -> List[StudentGradeOut]:
    student = get_student_for_user(db, user_id)
    TeacherUser = aliased(UserModel)
    query = (
        db.query(
            GradeModel.id, GradeModel.regular_score, GradeModel.midterm_score, GradeModel.final_score,
            GradeModel.total_score, GradeModel.needs_makeup, GradeModel.makeup_score, GradeModel.makeup_passed,
            CourseModel.name.label("course_name"), CourseModel.code.label("course_code"),
            SemesterModel.name.label("semester_name"),
            TeacherUser.name.label("teacher_name"),
        )
        .select_from(GradeModel)
        .join(CourseModel, CourseModel.id == GradeModel.course_id)
        .join(SemesterModel, SemesterModel.id == GradeModel.semester_id)
        .join(TeacherModel, TeacherModel.id == GradeModel.teacher_id)
        .join(TeacherUser, TeacherUser.id == TeacherModel.user_id)
        .filter(GradeModel.student_id == student.id)
    )
    if semester_id is not None:
        query = query.filter(GradeModel.semester_id == semester_id)
    rows = query.order_by(SemesterModel.start_date.desc(), CourseModel.name).all()
    return [StudentGradeOut.model_validate(r) for r in rows]


def get_grade_trend(db: Session, user_id: int) -> List[GradeTrendPoint]:
    student = get_student_for_user(db, user_id)
    rows = (
        db.query(
            SemesterModel.name.label("semester_name"), SemesterModel.start_date,
            CourseModel.name.label("course_name"), GradeModel.total_score,
        )
        .select_from(GradeModel)
        .join(CourseModel, CourseModel.id == GradeModel.course_id)
        .join(SemesterModel, SemesterModel.id == GradeModel.semester_id)
        .filter(GradeModel.student_id == student.id)
        .order_by(SemesterModel.start_date, CourseModel.name)
        .all()
    )
    return [GradeTrendPoint.model_validate(r) for r in rows]


# ==========================================================
# [ranking] year-level cohort standing
# ==========================================================
def get_ranking(db: Session, user_id: int, semester_id: Optional[int] = None) -> RankingOut:
    student = get_student_for_user(db, user_id)
    semester_id = resolve_semester_id(db, semester_id) or DEFAULT_RANKING_SEMESTER

    cohort = grade_store.fetch_cohort_averages(db, student.grade, semester_id)
    result = grading.rank_student(
        cohort, student.id,
        passing_score=settings.PASSING_SCORE,
        cutoff=settings.BOTTOM_PERCENTILE,
    )
    return RankingOut(
        rank=result.rank,
        total_students=result.total_students,
        percentile=result.percentile,
        avg_score=result.avg_score,
        requires_makeup=result.requires_makeup,
        is_bottom5_percent=result.is_bottom_5_percent,
    )


# ==========================================================
# [evaluation]
# ==========================================================
def get_evaluation_questions(db: Session) -> List[Question]:
    rows = (
        db.query(QuestionModel)
        .filter(QuestionModel.is_active.is_(True))
        .order_by(QuestionModel.order_number, QuestionModel.id)
        .all()
    )
    return [Question.model_validate(r) for r in rows]


def get_courses_for_evaluation(db: Session, user_id: int, semester_id: int) -> List[EvaluationCourse]:
    student = get_student_for_user(db, user_id)
    TeacherUser = aliased(UserModel)

    evaluated = exists().where(and_(
        EvaluationModel.student_id == student.id,
        EvaluationModel.teacher_id == TeacherModel.id,
        EvaluationModel.course_id == CourseModel.id,
        EvaluationModel.semester_id == semester_id,
    )).correlate(TeacherModel, CourseModel)
    rows = (
        db.query(
            CourseModel.id.label("course_id"), CourseModel.name.label("course_name"),
            TeacherModel.id.label("teacher_id"), TeacherUser.name.label("teacher_name"),
            evaluated.label("is_evaluated"),
        )
        .select_from(ScheduleModel)
        .join(CourseModel, CourseModel.id == ScheduleModel.course_id)
        .join(TeacherModel, TeacherModel.id == ScheduleModel.teacher_id)
        .join(TeacherUser, TeacherUser.id == TeacherModel.user_id)
        .filter(ScheduleModel.class_id == student.class_id, ScheduleModel.semester_id == semester_id)
        .distinct()
        .order_by(CourseModel.name, TeacherUser.name)
        .all()
    )
    return [EvaluationCourse.model_validate(r) for r in rows]


def submit_evaluation(db: Session, user_id: int, payload: EvaluationSubmit) -> int:
    """Stores one answer row per question. Returns the number of answers saved."""
    now = _utc_now()
    period = (
        db.query(PeriodModel)
        .filter(
            PeriodModel.semester_id == payload.semester_id,
            PeriodModel.is_active.is_(True),
            PeriodModel.start_date <= now,
            PeriodModel.end_date >= now,
        )
        .first()
    )
    if period is None:
        raise InvalidInputError("Evaluation period is not active")

    student = get_student_for_user(db, user_id)

    # only courses actually taught to the student's class can be evaluated
    taught = (
        db.query(ScheduleModel.id)
        .filter(
            ScheduleModel.class_id == student.class_id,
            ScheduleModel.teacher_id == payload.teacher_id,
            ScheduleModel.course_id == payload.course_id,
            ScheduleModel.semester_id == payload.semester_id,
        )
        .first()
    )
    if taught is None:
        raise UnauthorizedError("This teacher does not teach this course to your class")

    already = (
        db.query(EvaluationModel.id)
        .filter(
            EvaluationModel.student_id == student.id,
            EvaluationModel.teacher_id == payload.teacher_id,
            EvaluationModel.course_id == payload.course_id,
            EvaluationModel.semester_id == payload.semester_id,
        )
        .first()
    )
    if already is not None:
        raise ConflictError("Already submitted evaluation for this course")

    question_ids = {a.question_id for a in payload.answers}
    questions = {
        q.id: q
        for q in db.query(QuestionModel).filter(QuestionModel.id.in_(question_ids)).all()
    }
    for answer in payload.answers:
        question = questions.get(answer.question_id)
        if question is None or not question.is_active:
            raise InvalidInputError(f"Unknown or inactive question: {answer.question_id}")
        if question.question_type == "rating" and answer.rating_score is None:
            raise InvalidInputError(f"Question {answer.question_id} requires a rating")

        db.add(EvaluationModel(
            student_id=student.id,
            teacher_id=payload.teacher_id,
            course_id=payload.course_id,
            semester_id=payload.semester_id,
            question_id=answer.question_id,
            rating_score=answer.rating_score,
            text_answer=answer.text_answer or None,
        ))

    db.commit()
    logger.info(
        f"evaluation submitted: student={student.id} teacher={payload.teacher_id} "
        f"course={payload.course_id} semester={payload.semester_id}"
    )
    return len(payload.answers)
