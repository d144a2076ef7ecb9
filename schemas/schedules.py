from typing import Optional

from pydantic import Field, model_validator

from schemas.common import ApiModel


# ✅ input: admin creates a timetable slot
class ScheduleCreate(ApiModel):
    course_id: int
    teacher_id: int
    class_id: int
    classroom_id: int
    semester_id: int
    day_of_week: int = Field(..., ge=1, le=7)
    period_start: int = Field(..., ge=1)
    period_end: int = Field(..., ge=1)

    @model_validator(mode="after")
    def _periods_in_order(self):
        if self.period_end < self.period_start:
            raise ValueError("periodEnd must not be before periodStart")
        return self


# ✅ output: slot as seen by the student (who teaches it)
class StudentScheduleOut(ApiModel):
    id: int
    day_of_week: int
    period_start: int
    period_end: int
    is_substitute: bool
    substitute_note: Optional[str] = None
    is_rescheduled: bool
    reschedule_note: Optional[str] = None
    course_name: str
    course_code: str
    room_number: str
    building: str
    teacher_name: str


# ✅ output: slot as seen by the teacher (which class)
class TeacherScheduleOut(ApiModel):
    id: int
    day_of_week: int
    period_start: int
    period_end: int
    is_substitute: bool
    substitute_note: Optional[str] = None
    is_rescheduled: bool
    reschedule_note: Optional[str] = None
    course_name: str
    course_code: str
    room_number: str
    building: str
    class_name: str
    grade: int


# ✅ output: full slot for admins
class ScheduleOut(ApiModel):
    id: int
    course_id: int
    teacher_id: int
    class_id: int
    classroom_id: int
    semester_id: int
    day_of_week: int
    period_start: int
    period_end: int
    is_substitute: bool
    is_rescheduled: bool
    course_name: str
    course_code: str
    teacher_number: str
    teacher_name: str
    class_name: str
    room_number: str
    building: str
