from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import Principal, require_student
from schemas.common import ok
from schemas.evaluations import EvaluationSubmit
from services import student_service
from services.lookups import resolve_semester_id
from utils.errors import InvalidInputError

router = APIRouter(prefix="/student", tags=["student"])


# ==========================================================
# [1] timetable / grades
# ==========================================================

# ✅ own class timetable (current semester when omitted)
@router.get("/schedule")
def get_schedule(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    return ok(student_service.get_schedule(db, user.user_id, semester_id))


# ✅ own grades (every semester when omitted)
@router.get("/grades")
def get_grades(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    return ok(student_service.get_grades(db, user.user_id, semester_id))


# ✅ standing within the year-level cohort
@router.get("/ranking")
def get_ranking(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    return ok(student_service.get_ranking(db, user.user_id, semester_id))


@router.get("/grade-trend")
def get_grade_trend(user: Principal = Depends(require_student), db: Session = Depends(get_db)):
    return ok(student_service.get_grade_trend(db, user.user_id))


# ==========================================================
# [2] course evaluation
# ==========================================================
@router.get("/evaluation/questions")
def get_evaluation_questions(user: Principal = Depends(require_student), db: Session = Depends(get_db)):
    return ok(student_service.get_evaluation_questions(db))


@router.get("/evaluation/courses")
def get_evaluation_courses(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    semester_id = resolve_semester_id(db, semester_id)
    if semester_id is None:
        raise InvalidInputError("semesterId is required when no semester is marked current")
    return ok(student_service.get_courses_for_evaluation(db, user.user_id, semester_id))


@router.post("/evaluation/submit")
def submit_evaluation(
    payload: EvaluationSubmit,
    user: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    saved = student_service.submit_evaluation(db, user.user_id, payload)
    return ok({"answersSaved": saved}, "Evaluation submitted successfully")
