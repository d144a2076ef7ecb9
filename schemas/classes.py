from typing import Optional

from pydantic import Field

from schemas.common import ApiModel


# ✅ Response / Read schema
class Class(ApiModel):
    id: int
    grade: int
    class_number: int
    name: str
    head_teacher_id: Optional[int] = None


# ✅ Create request schema (id is generated by the DB)
class ClassCreate(ApiModel):
    grade: int = Field(..., ge=1)
    class_number: int = Field(..., ge=1)
    name: Optional[str] = None              # defaults to "Grade {grade} Class {class_number}"
    head_teacher_id: Optional[int] = None
