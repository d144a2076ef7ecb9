from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import Principal, require_admin
from schemas.common import ok
from schemas.evaluations import ListQuestions, PeriodCommand, QuestionCommand
from schemas.grades import ApprovalIn
from schemas.requests import ReviewIn, ReviewOut
from services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"])


# ==========================================================
# [1] course evaluation setup
# ==========================================================
@router.get("/evaluation-questions")
def list_evaluation_questions(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(admin_service.handle_question_command(db, ListQuestions(action="list")))


# ✅ {"action": "list" | "create" | "update" | "delete", ...}
@router.post("/evaluation-questions")
def manage_evaluation_questions(
    command: QuestionCommand = Body(...),
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(admin_service.handle_question_command(db, command))


@router.get("/evaluation-periods")
def list_evaluation_periods(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(admin_service.list_periods(db))


# ✅ {"action": "list" | "create" | "toggle", ...}
@router.post("/evaluation-periods")
def manage_evaluation_periods(
    command: PeriodCommand = Body(...),
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(admin_service.handle_period_command(db, command))


# ==========================================================
# [2] reschedule / substitute reviews
# ==========================================================
@router.get("/pending-requests")
def get_pending_requests(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(admin_service.get_pending_requests(db))


@router.post("/review-reschedule")
def review_reschedule(
    review: ReviewIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    admin_service.review_reschedule_request(db, review)
    return ok(ReviewOut(request_id=review.request_id, status=review.status), f"Request {review.status}")


@router.post("/review-substitute")
def review_substitute(
    review: ReviewIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    admin_service.review_substitute_request(db, review)
    return ok(ReviewOut(request_id=review.request_id, status=review.status), f"Request {review.status}")


# ==========================================================
# [3] grade reporting
# ==========================================================
@router.get("/grade-statistics")
def get_grade_statistics(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(admin_service.get_grade_statistics(db, semester_id))


@router.get("/cohort-ranking")
def get_cohort_ranking(
    grade: int = Query(..., ge=1),
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(admin_service.get_cohort_ranking(db, grade, semester_id))


# ==========================================================
# [4] makeup approvals (request, then score)
# ==========================================================
@router.get("/pending-makeup-requests")
def get_pending_makeup_requests(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(admin_service.get_pending_makeup_requests(db))


@router.post("/approve-makeup")
def approve_makeup(
    payload: ApprovalIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = admin_service.approve_makeup_request(db, payload.grade_id, payload.approved)
    return ok(result, "Makeup request approved" if payload.approved else "Makeup request rejected")


@router.get("/pending-makeup-scores")
def get_pending_makeup_scores(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(admin_service.get_pending_makeup_scores(db))


@router.post("/approve-makeup-score")
def approve_makeup_score(
    payload: ApprovalIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = admin_service.approve_makeup_score(db, payload.grade_id, payload.approved)
    return ok(result, "Makeup score approved" if payload.approved else "Makeup score rejected")
