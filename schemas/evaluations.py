from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, model_validator

from schemas.common import ApiModel

QuestionType = Literal["rating", "text"]


# ==========================================================
# [student] questionnaire + submission
# ==========================================================
class Question(ApiModel):
    id: int
    question_text: str
    question_type: str
    order_number: int
    is_active: bool = True


class EvaluationAnswer(ApiModel):
    question_id: int
    rating_score: Optional[int] = Field(None, ge=1, le=5)
    text_answer: Optional[str] = None

    @model_validator(mode="after")
    def _has_answer(self):
        if self.rating_score is None and not self.text_answer:
            raise ValueError("either ratingScore or textAnswer is required")
        return self


class EvaluationSubmit(ApiModel):
    teacher_id: int
    course_id: int
    semester_id: int
    answers: List[EvaluationAnswer] = Field(..., min_length=1)


class EvaluationCourse(ApiModel):
    course_id: int
    course_name: str
    teacher_id: int
    teacher_name: str
    is_evaluated: bool


# ✅ teacher: aggregated results per question
class EvaluationResult(ApiModel):
    question_id: int
    question_text: str
    question_type: str
    avg_rating: Optional[float] = None
    response_count: int


# ==========================================================
# [admin] question management commands, tagged by "action"
# ==========================================================
class ListQuestions(ApiModel):
    action: Literal["list"]


class CreateQuestion(ApiModel):
    action: Literal["create"]
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = "rating"
    order_number: int = 0


class UpdateQuestion(ApiModel):
    action: Literal["update"]
    id: int
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = "rating"
    order_number: int = 0
    is_active: bool = True


class DeleteQuestion(ApiModel):
    action: Literal["delete"]
    id: int


QuestionCommand = Annotated[
    Union[ListQuestions, CreateQuestion, UpdateQuestion, DeleteQuestion],
    Field(discriminator="action"),
]


# ==========================================================
# [admin] evaluation period commands
# ==========================================================
class Period(ApiModel):
    id: int
    semester_id: int
    semester_name: str
    start_date: datetime
    end_date: datetime
    is_active: bool


class ListPeriods(ApiModel):
    action: Literal["list"]


class CreatePeriod(ApiModel):
    action: Literal["create"]
    semester_id: int
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _window_in_order(self):
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class TogglePeriod(ApiModel):
    action: Literal["toggle"]
    id: int
    is_active: bool


PeriodCommand = Annotated[
    Union[ListPeriods, CreatePeriod, TogglePeriod],
    Field(discriminator="action"),
]
