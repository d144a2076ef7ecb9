from typing import Optional

from schemas.common import ApiModel


# ✅ roster row (teacher class-students view)
class StudentOut(ApiModel):
    id: int
    student_number: str
    name: str
    email: Optional[str] = None
    class_name: str
    grade: int
