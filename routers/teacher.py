from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import Principal, require_teacher
from schemas.common import ok
from schemas.grades import MakeupScoreIn, UploadGradesIn
from schemas.requests import RequestCreated, RescheduleRequestIn, SubstituteRequestIn
from services import teacher_service

router = APIRouter(prefix="/teacher", tags=["teacher"])


# ==========================================================
# [1] timetable / roster
# ==========================================================
@router.get("/schedule")
def get_schedule(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    return ok(teacher_service.get_schedule(db, user.user_id, semester_id))


# ✅ only classes taught by the caller this semester
@router.get("/class-students")
def get_class_students(
    class_id: int = Query(..., alias="classId"),
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    return ok(teacher_service.get_class_students(db, user.user_id, class_id))


# ==========================================================
# [2] grades
# ==========================================================

# ✅ component scores -> total + makeup flag per student
@router.post("/upload-grades")
def upload_grades(
    payload: UploadGradesIn,
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    result = teacher_service.upload_grades(db, user.user_id, payload)
    return ok(result, "Grades uploaded successfully")


@router.get("/evaluation-results")
def get_evaluation_results(
    course_id: int = Query(..., alias="courseId"),
    semester_id: int = Query(..., alias="semesterId"),
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    return ok(teacher_service.get_evaluation_results(db, user.user_id, course_id, semester_id))


# ==========================================================
# [3] reschedule / substitute requests
# ==========================================================
@router.post("/reschedule-request")
def submit_reschedule_request(
    payload: RescheduleRequestIn,
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    request_id = teacher_service.submit_reschedule_request(db, user.user_id, payload)
    return ok(RequestCreated(request_id=request_id), "Reschedule request submitted")


@router.post("/substitute-request")
def submit_substitute_request(
    payload: SubstituteRequestIn,
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    request_id = teacher_service.submit_substitute_request(db, user.user_id, payload)
    return ok(RequestCreated(request_id=request_id), "Substitute request submitted")


@router.get("/requests")
def get_requests(user: Principal = Depends(require_teacher), db: Session = Depends(get_db)):
    return ok(teacher_service.get_teacher_requests(db, user.user_id))


# ==========================================================
# [4] makeup exams
# ==========================================================
@router.get("/makeup-students")
def get_makeup_students(
    course_id: int = Query(..., alias="courseId"),
    semester_id: int = Query(..., alias="semesterId"),
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    return ok(teacher_service.get_students_needing_makeup(db, user.user_id, course_id, semester_id))


# ✅ only after the admin approved the makeup request
@router.post("/makeup-score")
def upload_makeup_score(
    payload: MakeupScoreIn,
    user: Principal = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    result = teacher_service.upload_makeup_score(db, user.user_id, payload)
    return ok(result, "Makeup score submitted, awaiting admin approval")
