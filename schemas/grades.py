from datetime import date
from typing import List, Optional

from pydantic import Field

from schemas.common import ApiModel


# ==========================================================
# [input] teacher score upload
# ==========================================================
class GradeEntry(ApiModel):
    student_id: int
    regular_score: float = Field(..., ge=0, le=100)
    midterm_score: Optional[float] = Field(None, ge=0, le=100)   # ignored when the course has no midterm
    final_score: float = Field(..., ge=0, le=100)


class UploadGradesIn(ApiModel):
    course_id: int
    semester_id: int
    grades: List[GradeEntry] = Field(..., min_length=1)


class UploadGradesOut(ApiModel):
    grades_uploaded: int
    needs_makeup: int
    grade_ids: List[int]


# ==========================================================
# [input] makeup workflow
# ==========================================================
class MakeupScoreIn(ApiModel):
    grade_id: int
    makeup_score: float = Field(..., ge=0, le=100)
    makeup_passed: Optional[bool] = None     # defaults to makeupScore >= passing score


class MakeupScoreOut(ApiModel):
    grade_id: int
    makeup_score: float
    makeup_passed: bool
    state: str


class ApprovalIn(ApiModel):
    grade_id: int
    approved: bool


class ApprovalOut(ApiModel):
    grade_id: int
    approved: bool
    state: str


# ==========================================================
# [output] student views
# ==========================================================
class StudentGradeOut(ApiModel):
    id: int
    regular_score: float
    midterm_score: Optional[float] = None
    final_score: float
    total_score: float
    needs_makeup: bool
    makeup_score: Optional[float] = None
    makeup_passed: Optional[bool] = None
    course_name: str
    course_code: str
    semester_name: str
    teacher_name: str


class GradeTrendPoint(ApiModel):
    semester_name: str
    start_date: date
    course_name: str
    total_score: float


class RankingOut(ApiModel):
    rank: int
    total_students: int
    percentile: float
    avg_score: float
    requires_makeup: bool
    is_bottom5_percent: bool


class CohortRankingEntry(ApiModel):
    student_id: int
    student_number: Optional[str] = None
    name: Optional[str] = None
    course_count: int
    rank: int
    percentile: float
    avg_score: float
    requires_makeup: bool
    is_bottom5_percent: bool


class CohortRankingOut(ApiModel):
    grade: int
    semester_id: int
    total_students: int
    students: List[CohortRankingEntry]


# ==========================================================
# [output] makeup lists
# ==========================================================
class MakeupCandidateOut(ApiModel):
    grade_id: int
    total_score: float
    needs_makeup: bool
    makeup_approved: Optional[bool] = None
    makeup_score: Optional[float] = None
    makeup_passed: Optional[bool] = None
    makeup_approved_final: Optional[bool] = None
    student_name: str
    student_number: str
    class_name: str


class PendingMakeupRequestOut(ApiModel):
    grade_id: int
    total_score: float
    needs_makeup: bool
    makeup_approved: Optional[bool] = None
    student_name: str
    student_number: str
    grade: int
    class_name: str
    course_name: str
    teacher_name: str


class PendingMakeupScoreOut(ApiModel):
    grade_id: int
    total_score: float
    makeup_score: float
    makeup_passed: Optional[bool] = None
    makeup_approved_final: Optional[bool] = None
    student_name: str
    student_number: str
    class_name: str
    course_name: str
    teacher_name: str


# ==========================================================
# [output] school statistics
# ==========================================================
class OverallStats(ApiModel):
    total_students: int
    total_courses: int
    avg_score: Optional[float] = None
    makeup_count: int


class ScoreBand(ApiModel):
    score_range: str
    count: int


class CourseAverage(ApiModel):
    course_name: str
    avg_score: float
    student_count: int


class MakeupStudent(ApiModel):
    student_name: str
    student_number: str
    class_name: str
    course_name: str
    total_score: float


class GradeStatisticsOut(ApiModel):
    semester_id: Optional[int] = None
    overall: OverallStats
    distribution: List[ScoreBand]
    course_averages: List[CourseAverage]
    makeup_students: List[MakeupStudent]
