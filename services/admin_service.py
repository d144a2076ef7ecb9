"""
services/admin_service.py

Admin workflows: evaluation questionnaire/periods, reschedule and substitute
reviews, makeup approvals (both stages), school statistics and cohort rankings.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session, aliased

from config.settings import settings
from models.classes import Class as ClassModel
from models.classrooms import Classroom as ClassroomModel
from models.courses import Course as CourseModel
from models.evaluations import Evaluation as EvaluationModel
from models.evaluations import EvaluationPeriod as PeriodModel
from models.evaluations import EvaluationQuestion as QuestionModel
from models.grades import Grade as GradeModel
from models.requests import RescheduleRequest as RescheduleModel
from models.requests import SubstituteRequest as SubstituteModel
from models.schedules import Schedule as ScheduleModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from models.users import User as UserModel
from schemas.evaluations import (
    CreatePeriod, CreateQuestion, DeleteQuestion, ListPeriods, ListQuestions, Period, Question,
    TogglePeriod, UpdateQuestion,
)
from schemas.grades import (
    ApprovalOut, CohortRankingEntry, CohortRankingOut, CourseAverage, GradeStatisticsOut, MakeupStudent,
    OverallStats, PendingMakeupRequestOut, PendingMakeupScoreOut, ScoreBand,
)
from schemas.requests import RequestsOut, RescheduleRequestOut, ReviewIn, SubstituteRequestOut
from services import approval, grade_store, grading
from services.lookups import resolve_semester_id
from services.master_data_service import find_classroom_overlap
from services.teacher_service import reschedule_requests_query, substitute_requests_query
from utils.errors import ConflictError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

# (label, lower bound inclusive), checked top-down
SCORE_BANDS = [
    ("Excellent (90-100)", 90),
    ("Good (80-89)", 80),
    ("Average (70-79)", 70),
    ("Pass (60-69)", 60),
    ("Fail (<60)", None),
]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ==========================================================
# [evaluation] questionnaire commands
# ==========================================================
def handle_question_command(db: Session, command):
    if isinstance(command, ListQuestions):
        rows = db.query(QuestionModel).order_by(QuestionModel.order_number, QuestionModel.id).all()
        return [Question.model_validate(r) for r in rows]

    if isinstance(command, CreateQuestion):
        question = QuestionModel(
            question_text=command.question_text,
            question_type=command.question_type,
            order_number=command.order_number,
            is_active=True,
        )
        db.add(question)
        db.commit()
        db.refresh(question)
        return {"id": question.id}

    if isinstance(command, UpdateQuestion):
        question = db.query(QuestionModel).filter(QuestionModel.id == command.id).first()
        if question is None:
            raise NotFoundError("Question not found")
        question.question_text = command.question_text
        question.question_type = command.question_type
        question.order_number = command.order_number
        question.is_active = command.is_active
        db.commit()
        return {"id": question.id}

    if isinstance(command, DeleteQuestion):
        question = db.query(QuestionModel).filter(QuestionModel.id == command.id).first()
        if question is None:
            raise NotFoundError("Question not found")
        if db.query(EvaluationModel.id).filter(EvaluationModel.question_id == command.id).first():
            raise ConflictError("Question already has answers; deactivate it instead")
        db.delete(question)
        db.commit()
        return {"id": command.id}

    raise InvalidInputError("Invalid action")


# ==========================================================
# [evaluation] period commands
# ==========================================================
def list_periods(db: Session) -> List[Period]:
    rows = (
        db.query(
            PeriodModel.id, PeriodModel.semester_id, SemesterModel.name.label("semester_name"),
            PeriodModel.start_date, PeriodModel.end_date, PeriodModel.is_active,
        )
        .select_from(PeriodModel)
        .join(SemesterModel, SemesterModel.id == PeriodModel.semester_id)
        .order_by(PeriodModel.start_date.desc())
        .all()
    )
    return [Period.model_validate(r) for r in rows]


def handle_period_command(db: Session, command):
    if isinstance(command, ListPeriods):
        return list_periods(db)

    if isinstance(command, CreatePeriod):
        semester = db.query(SemesterModel.id).filter(SemesterModel.id == command.semester_id).first()
        if semester is None:
            raise NotFoundError("Semester not found")
        period = PeriodModel(
            semester_id=command.semester_id,
            # stored as naive UTC
            start_date=_naive_utc(command.start_date),
            end_date=_naive_utc(command.end_date),
            is_active=True,
        )
        db.add(period)
        db.commit()
        db.refresh(period)
        return {"id": period.id}

    if isinstance(command, TogglePeriod):
        period = db.query(PeriodModel).filter(PeriodModel.id == command.id).first()
        if period is None:
            raise NotFoundError("Evaluation period not found")
        period.is_active = command.is_active
        db.commit()
        return {"id": period.id, "isActive": period.is_active}

    raise InvalidInputError("Invalid action")


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ==========================================================
# [requests] reschedule / substitute review
# ==========================================================
def get_pending_requests(db: Session) -> RequestsOut:
    reschedules = reschedule_requests_query(db).filter(RescheduleModel.status == "pending").all()
    substitutes = substitute_requests_query(db).filter(SubstituteModel.status == "pending").all()
    return RequestsOut(
        reschedule_requests=[RescheduleRequestOut.model_validate(r) for r in reschedules],
        substitute_requests=[SubstituteRequestOut.model_validate(r) for r in substitutes],
    )


def review_reschedule_request(db: Session, review: ReviewIn) -> None:
    request = db.query(RescheduleModel).filter(RescheduleModel.id == review.request_id).first()
    if request is None:
        raise NotFoundError("Reschedule request not found")
    if request.status != "pending":
        raise ConflictError(f"Request already {request.status}")

    if review.status == "approved":
        schedule = db.query(ScheduleModel).filter(ScheduleModel.id == request.schedule_id).first()
        if schedule is None:
            raise NotFoundError("Schedule not found")

        # unset target fields keep the current slot values
        day_of_week = _pick(request.new_day_of_week, schedule.day_of_week)
        period_start = _pick(request.new_period_start, schedule.period_start)
        period_end = _pick(request.new_period_end, schedule.period_end)
        classroom_id = _pick(request.new_classroom_id, schedule.classroom_id)

        if period_end < period_start:
            raise InvalidInputError("Rescheduled slot ends before it starts")
        if db.query(ClassroomModel.id).filter(ClassroomModel.id == classroom_id).first() is None:
            raise NotFoundError(f"Classroom not found: {classroom_id}")
        clash = find_classroom_overlap(
            db, semester_id=schedule.semester_id, classroom_id=classroom_id, day_of_week=day_of_week,
            period_start=period_start, period_end=period_end, exclude_id=schedule.id,
        )
        if clash is not None:
            raise ConflictError(f"Classroom is already booked for that time slot (schedule {clash})")

        schedule.day_of_week = day_of_week
        schedule.period_start = period_start
        schedule.period_end = period_end
        schedule.classroom_id = classroom_id
        schedule.is_rescheduled = True
        schedule.reschedule_note = request.reason

    request.status = review.status
    request.admin_note = review.admin_note or None
    request.reviewed_at = _utc_now()
    db.commit()
    logger.info(f"reschedule request {request.id} {review.status}")


def _pick(new_value, current_value):
    return current_value if new_value is None else new_value


def review_substitute_request(db: Session, review: ReviewIn) -> None:
    request = db.query(SubstituteModel).filter(SubstituteModel.id == review.request_id).first()
    if request is None:
        raise NotFoundError("Substitute request not found")
    if request.status != "pending":
        raise ConflictError(f"Request already {request.status}")

    request.status = review.status
    request.admin_note = review.admin_note or None
    request.reviewed_at = _utc_now()

    if review.status == "approved":
        schedule = db.query(ScheduleModel).filter(ScheduleModel.id == request.schedule_id).first()
        if schedule is None:
            raise NotFoundError("Schedule not found")
        schedule.is_substitute = True
        schedule.substitute_note = f"Substitute teacher arranged - {request.substitute_date.isoformat()}"

    db.commit()
    logger.info(f"substitute request {request.id} {review.status}")


# ==========================================================
# [statistics] school-wide grade summary
# ==========================================================
def score_band(total_score: float) -> str:
    for label, lower in SCORE_BANDS:
        if lower is None or total_score >= lower:
            return label
    return SCORE_BANDS[-1][0]


def get_grade_statistics(db: Session, semester_id: Optional[int] = None) -> GradeStatisticsOut:
    semester_id = resolve_semester_id(db, semester_id)
    if semester_id is None:
        raise InvalidInputError("semesterId is required when no semester is marked current")

    overall = (
        db.query(
            func.count(distinct(GradeModel.student_id)).label("total_students"),
            func.count(distinct(GradeModel.course_id)).label("total_courses"),
            func.avg(GradeModel.total_score).label("avg_score"),
        )
        .filter(GradeModel.semester_id == semester_id)
        .one()
    )
    makeup_count = (
        db.query(func.count(GradeModel.id))
        .filter(GradeModel.semester_id == semester_id, GradeModel.needs_makeup.is_(True))
        .scalar()
    )

    totals = [t for (t,) in db.query(GradeModel.total_score).filter(GradeModel.semester_id == semester_id).all()]
    counts = {}
    for total in totals:
        label = score_band(total)
        counts[label] = counts.get(label, 0) + 1
    distribution = [ScoreBand(score_range=label, count=counts[label]) for label, _ in SCORE_BANDS if label in counts]

    course_rows = (
        db.query(
            CourseModel.name.label("course_name"),
            func.avg(GradeModel.total_score).label("avg_score"),
            func.count(GradeModel.id).label("student_count"),
        )
        .select_from(GradeModel)
        .join(CourseModel, CourseModel.id == GradeModel.course_id)
        .filter(GradeModel.semester_id == semester_id)
        .group_by(CourseModel.id, CourseModel.name)
        .order_by(func.avg(GradeModel.total_score).desc())
        .all()
    )

    makeup_rows = (
        db.query(
            UserModel.name.label("student_name"), StudentModel.student_number,
            ClassModel.name.label("class_name"), CourseModel.name.label("course_name"),
            GradeModel.total_score,
        )
        .select_from(GradeModel)
        .join(StudentModel, StudentModel.id == GradeModel.student_id)
        .join(UserModel, UserModel.id == StudentModel.user_id)
        .join(ClassModel, ClassModel.id == StudentModel.class_id)
        .join(CourseModel, CourseModel.id == GradeModel.course_id)
        .filter(GradeModel.semester_id == semester_id, GradeModel.needs_makeup.is_(True))
        .order_by(ClassModel.name, StudentModel.student_number)
        .all()
    )

    return GradeStatisticsOut(
        semester_id=semester_id,
        overall=OverallStats(
            total_students=overall.total_students or 0,
            total_courses=overall.total_courses or 0,
            avg_score=round(float(overall.avg_score), 2) if overall.avg_score is not None else None,
            makeup_count=makeup_count or 0,
        ),
        distribution=distribution,
        course_averages=[
            CourseAverage(course_name=r.course_name, avg_score=round(float(r.avg_score), 2),
                          student_count=r.student_count)
            for r in course_rows
        ],
        makeup_students=[MakeupStudent.model_validate(r) for r in makeup_rows],
    )


def get_cohort_ranking(db: Session, grade: int, semester_id: Optional[int] = None) -> CohortRankingOut:
    semester_id = resolve_semester_id(db, semester_id)
    if semester_id is None:
        raise InvalidInputError("semesterId is required when no semester is marked current")

    ranked = grading.rank_cohort(
        grade_store.fetch_cohort_averages(db, grade, semester_id),
        passing_score=settings.PASSING_SCORE,
        cutoff=settings.BOTTOM_PERCENTILE,
    )
    return CohortRankingOut(
        grade=grade,
        semester_id=semester_id,
        total_students=len(ranked),
        students=[
            CohortRankingEntry(
                student_id=r.entry.student_id,
                student_number=r.entry.student_number,
                name=r.entry.name,
                course_count=r.entry.course_count,
                rank=r.ranking.rank,
                percentile=r.ranking.percentile,
                avg_score=r.ranking.avg_score,
                requires_makeup=r.ranking.requires_makeup,
                is_bottom5_percent=r.ranking.is_bottom_5_percent,
            )
            for r in ranked
        ],
    )


# ==========================================================
# [makeup] two-stage approval
# ==========================================================
def _makeup_listing_query(db: Session):
    StudentUser = aliased(UserModel)
    TeacherUser = aliased(UserModel)
    return (
        db.query(
            GradeModel.id.label("grade_id"), GradeModel.total_score, GradeModel.needs_makeup,
            GradeModel.makeup_approved, GradeModel.makeup_score, GradeModel.makeup_passed,
            GradeModel.makeup_approved_final,
            StudentUser.name.label("student_name"), StudentModel.student_number, StudentModel.grade,
            ClassModel.name.label("class_name"), CourseModel.name.label("course_name"),
            TeacherUser.name.label("teacher_name"),
        )
        .select_from(GradeModel)
        .join(StudentModel, StudentModel.id == GradeModel.student_id)
        .join(StudentUser, StudentUser.id == StudentModel.user_id)
        .join(ClassModel, ClassModel.id == StudentModel.class_id)
        .join(CourseModel, CourseModel.id == GradeModel.course_id)
        .join(TeacherModel, TeacherModel.id == GradeModel.teacher_id)
        .join(TeacherUser, TeacherUser.id == TeacherModel.user_id)
    )


def get_pending_makeup_requests(db: Session) -> List[PendingMakeupRequestOut]:
    rows = (
        _makeup_listing_query(db)
        .filter(GradeModel.needs_makeup.is_(True), GradeModel.makeup_approved.is_(None))
        .order_by(StudentModel.grade, ClassModel.name, StudentModel.student_number)
        .all()
    )
    return [PendingMakeupRequestOut.model_validate(r) for r in rows]


def get_pending_makeup_scores(db: Session) -> List[PendingMakeupScoreOut]:
    rows = (
        _makeup_listing_query(db)
        .filter(
            GradeModel.makeup_approved.is_(True),
            GradeModel.makeup_score.isnot(None),
            GradeModel.makeup_approved_final.is_(None),
        )
        .order_by(ClassModel.name, StudentModel.student_number)
        .all()
    )
    return [PendingMakeupScoreOut.model_validate(r) for r in rows]


def approve_makeup_request(db: Session, grade_id: int, approved: bool) -> ApprovalOut:
    grade = grade_store.get_grade(db, grade_id)
    approval.check_request_decision(grade)
    grade = grade_store.update_approval_flag(db, grade_id, approval.REQUEST_FLAG, approved)
    db.commit()
    return ApprovalOut(grade_id=grade.id, approved=approved, state=approval.current_state(grade).value)


def approve_makeup_score(db: Session, grade_id: int, approved: bool) -> ApprovalOut:
    grade = grade_store.get_grade(db, grade_id)
    approval.check_score_decision(grade)
    grade = grade_store.update_approval_flag(db, grade_id, approval.FINAL_FLAG, approved)
    db.commit()
    return ApprovalOut(grade_id=grade.id, approved=approved, state=approval.current_state(grade).value)
