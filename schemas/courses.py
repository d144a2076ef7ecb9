from pydantic import Field

from schemas.common import ApiModel


# ✅ input: new course
class CourseCreate(ApiModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=20)
    credits: float = Field(1.0, gt=0)
    has_midterm_exam: bool = True


# ✅ output
class Course(CourseCreate):
    id: int


# ✅ input: weighting policy toggle
class CourseSettingsIn(ApiModel):
    has_midterm_exam: bool


class CourseSettingsOut(ApiModel):
    course_id: int
    has_midterm_exam: bool
    # grades written under the other policy; they keep their stored totals
    stale_grades: int
