from typing import List, Literal, Optional

from pydantic import Field, model_validator

from schemas.common import ApiModel


# ✅ login request / response
class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(ApiModel):
    id: int
    username: str
    role: str
    name: str
    email: Optional[str] = None


class LoginResponse(ApiModel):
    token: str
    user: UserOut


# ✅ role specific profile data for user creation
class StudentInfo(ApiModel):
    student_number: str
    class_id: int
    grade: int = Field(..., ge=1)


class TeacherInfo(ApiModel):
    teacher_number: str
    department: Optional[str] = None
    title: Optional[str] = None


# ✅ admin: create one user
class UserCreate(ApiModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)
    role: Literal["student", "teacher", "admin"]
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    additional_info: Optional[dict] = None

    @model_validator(mode="after")
    def _profile_for_role(self):
        # students and teachers need their profile block, validated against the right shape
        if self.role == "student":
            if self.additional_info is None:
                raise ValueError("additionalInfo is required for students")
            StudentInfo.model_validate(self.additional_info)
        elif self.role == "teacher":
            if self.additional_info is None:
                raise ValueError("additionalInfo is required for teachers")
            TeacherInfo.model_validate(self.additional_info)
        return self


class UserCreated(ApiModel):
    user_id: int


# ✅ admin: batch student import
class BatchStudent(ApiModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    student_number: str
    class_id: int
    grade: int = Field(..., ge=1)


class BatchStudentsIn(ApiModel):
    students: List[BatchStudent] = Field(..., min_length=1)


class BatchResult(ApiModel):
    success: bool
    username: str
    user_id: Optional[int] = None
    error: Optional[str] = None
