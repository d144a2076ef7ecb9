"""
services/approval.py

Makeup exam workflow on top of a grade row.

    NOT_REQUESTED
    REQUEST_PENDING  -> REQUEST_APPROVED | REQUEST_REJECTED       (admin)
    REQUEST_APPROVED -> SCORE_PENDING                             (owning teacher submits makeup score)
    SCORE_PENDING    -> SCORE_APPROVED | SCORE_REJECTED           (admin)

Flags are tri-state on the row: None = pending, True = approved, False = rejected.
Admin decisions overwrite the previous decision.
"""

import enum
from typing import Optional

from services.grading import PASSING_SCORE, validate_score
from utils.errors import InvalidInputError, UnauthorizedError

REQUEST_FLAG = "makeup_approved"
FINAL_FLAG = "makeup_approved_final"
APPROVAL_FIELDS = (REQUEST_FLAG, FINAL_FLAG)


class MakeupState(str, enum.Enum):
    NOT_REQUESTED = "not_requested"
    REQUEST_PENDING = "request_pending"
    REQUEST_APPROVED = "request_approved"
    REQUEST_REJECTED = "request_rejected"
    SCORE_PENDING = "score_pending"
    SCORE_APPROVED = "score_approved"
    SCORE_REJECTED = "score_rejected"


def current_state(grade) -> MakeupState:
    if not grade.needs_makeup:
        return MakeupState.NOT_REQUESTED
    if grade.makeup_approved is None:
        return MakeupState.REQUEST_PENDING
    if grade.makeup_approved is False:
        return MakeupState.REQUEST_REJECTED
    if grade.makeup_score is None:
        return MakeupState.REQUEST_APPROVED
    if grade.makeup_approved_final is None:
        return MakeupState.SCORE_PENDING
    return MakeupState.SCORE_APPROVED if grade.makeup_approved_final else MakeupState.SCORE_REJECTED


def check_request_decision(grade) -> None:
    """Admin may decide a makeup request only for a failing grade."""
    if not grade.needs_makeup:
        raise InvalidInputError("Grade does not require a makeup exam")


def check_score_decision(grade) -> None:
    """Admin may decide a makeup score only after the teacher submitted one."""
    if grade.makeup_approved is not True:
        raise InvalidInputError("Makeup exam has not been approved")
    if grade.makeup_score is None:
        raise InvalidInputError("No makeup score has been submitted")


def apply_makeup_score(grade, teacher_id: int, makeup_score: float, makeup_passed: Optional[bool] = None,
                       passing_score: float = PASSING_SCORE) -> MakeupState:
    """Owning teacher records the makeup result; the final approval goes back to pending."""
    if grade.teacher_id != teacher_id:
        raise UnauthorizedError("This grade record does not belong to you")
    if grade.makeup_approved is not True:
        raise UnauthorizedError("Makeup exam not approved for this grade")

    score = validate_score("makeupScore", makeup_score)
    grade.makeup_score = score
    grade.makeup_passed = makeup_passed if makeup_passed is not None else score >= passing_score
    grade.makeup_approved_final = None
    return current_state(grade)
