from pydantic import Field

from schemas.common import ApiModel


class ClassroomCreate(ApiModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    building: str = Field(..., min_length=1)
    capacity: int = Field(40, ge=1)
    type: str = "normal"


class Classroom(ClassroomCreate):
    id: int
