from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field

from schemas.common import ApiModel


# ==========================================================
# [teacher] input
# ==========================================================
class RescheduleRequestIn(ApiModel):
    schedule_id: int
    reason: str = Field(..., min_length=1)
    request_type: Literal["reschedule", "cancel", "makeup_class"] = "reschedule"
    original_date: Optional[date] = None
    new_date: Optional[date] = None
    new_day_of_week: Optional[int] = Field(None, ge=1, le=7)
    new_period_start: Optional[int] = Field(None, ge=1)
    new_period_end: Optional[int] = Field(None, ge=1)
    new_classroom_id: Optional[int] = None


class SubstituteRequestIn(ApiModel):
    schedule_id: int
    substitute_teacher_id: int
    reason: str = Field(..., min_length=1)
    substitute_date: date


class RequestCreated(ApiModel):
    request_id: int


# ==========================================================
# [admin] review
# ==========================================================
class ReviewIn(ApiModel):
    request_id: int
    status: Literal["approved", "rejected"]
    admin_note: Optional[str] = None


class ReviewOut(ApiModel):
    request_id: int
    status: str


# ==========================================================
# output
# ==========================================================
class RescheduleRequestOut(ApiModel):
    id: int
    schedule_id: int
    reason: str
    request_type: str
    original_date: Optional[date] = None
    new_date: Optional[date] = None
    new_day_of_week: Optional[int] = None
    new_period_start: Optional[int] = None
    new_period_end: Optional[int] = None
    new_classroom_id: Optional[int] = None
    status: str
    admin_note: Optional[str] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    course_name: str
    class_name: str
    teacher_name: Optional[str] = None


class SubstituteRequestOut(ApiModel):
    id: int
    schedule_id: int
    reason: str
    substitute_date: date
    status: str
    admin_note: Optional[str] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    course_name: str
    class_name: str
    original_teacher_name: Optional[str] = None
    substitute_teacher_name: str


class RequestsOut(ApiModel):
    reschedule_requests: List[RescheduleRequestOut]
    substitute_requests: List[SubstituteRequestOut]
