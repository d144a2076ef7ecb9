from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import Principal, require_admin
from schemas.classes import ClassCreate
from schemas.classrooms import ClassroomCreate
from schemas.common import ok
from schemas.courses import CourseCreate, CourseSettingsIn
from schemas.schedules import ScheduleCreate
from schemas.semesters import SemesterCreate
from schemas.users import BatchStudentsIn, UserCreate, UserCreated
from services import master_data_service

router = APIRouter(prefix="/admin", tags=["admin: master data"])


# ==========================================================
# [users]
# ==========================================================
@router.post("/create-user")
def create_user(payload: UserCreate, user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    user_id = master_data_service.create_user(db, payload)
    return ok(UserCreated(user_id=user_id), "User created successfully")


# ✅ per-row report; a bad row does not stop the batch
@router.post("/batch-create-students")
def batch_create_students(
    payload: BatchStudentsIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    results = master_data_service.batch_create_students(db, payload)
    created = sum(1 for r in results if r.success)
    return ok(results, f"{created} of {len(results)} students created")


# ==========================================================
# [courses]
# ==========================================================
@router.get("/courses")
def list_courses(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(master_data_service.list_courses(db))


@router.post("/courses")
def create_course(payload: CourseCreate, user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok({"id": master_data_service.create_course(db, payload)}, "Course created successfully")


# ✅ midterm policy toggle; stored totals are not recomputed
@router.put("/courses/{course_id}/settings")
def update_course_settings(
    course_id: int,
    payload: CourseSettingsIn,
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(master_data_service.update_course_settings(db, course_id, payload.has_midterm_exam))


# ==========================================================
# [teachers / classes / classrooms]
# ==========================================================
@router.get("/teachers")
def list_teachers(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(master_data_service.list_teachers(db))


@router.get("/classes")
def list_classes(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(master_data_service.list_classes(db))


@router.post("/classes")
def create_class(payload: ClassCreate, user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok({"id": master_data_service.create_class(db, payload)}, "Class created successfully")


@router.get("/classrooms")
def list_classrooms(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(master_data_service.list_classrooms(db))


@router.post("/classrooms")
def create_classroom(payload: ClassroomCreate, user: Principal = Depends(require_admin),
                     db: Session = Depends(get_db)):
    return ok({"id": master_data_service.create_classroom(db, payload)}, "Classroom created successfully")


# ==========================================================
# [schedules / semesters]
# ==========================================================
@router.get("/schedules")
def list_schedules(
    semester_id: Optional[int] = Query(None, alias="semesterId"),
    class_id: Optional[int] = Query(None, alias="classId"),
    user: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(master_data_service.list_schedules(db, semester_id, class_id))


@router.post("/schedules")
def create_schedule(payload: ScheduleCreate, user: Principal = Depends(require_admin),
                    db: Session = Depends(get_db)):
    return ok({"id": master_data_service.create_schedule(db, payload)}, "Schedule created successfully")


@router.delete("/schedules/{schedule_id}")
def delete_schedule(schedule_id: int, user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    master_data_service.delete_schedule(db, schedule_id)
    return ok({"id": schedule_id}, "Schedule deleted")


@router.get("/semesters")
def list_semesters(user: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return ok(master_data_service.list_semesters(db))


@router.post("/semesters")
def create_semester(payload: SemesterCreate, user: Principal = Depends(require_admin),
                    db: Session = Depends(get_db)):
    return ok({"id": master_data_service.create_semester(db, payload)}, "Semester created successfully")
