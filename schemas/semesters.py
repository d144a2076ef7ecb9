from datetime import date

from pydantic import model_validator

from schemas.common import ApiModel


class SemesterCreate(ApiModel):
    name: str
    start_date: date
    end_date: date
    is_current: bool = False

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class Semester(SemesterCreate):
    id: int
