from typing import Optional

from schemas.common import ApiModel


# ✅ output: teacher list for admins
class TeacherOut(ApiModel):
    id: int
    user_id: int
    teacher_number: str
    department: Optional[str] = None
    title: Optional[str] = None
    name: str
    email: Optional[str] = None
