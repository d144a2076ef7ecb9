"""Teacher flows: grade upload, roster, requests and makeup scores."""

import pytest

from models.grades import Grade as GradeModel
from models.requests import RescheduleRequest as RescheduleModel
from models.schedules import Schedule as ScheduleModel


def upload(client, school, grades, course=None, headers=None):
    course = course or school.course
    return client.post(
        "/api/teacher/upload-grades",
        headers=headers or school.teacher_headers,
        json={"courseId": course.id, "semesterId": school.semester.id, "grades": grades},
    )


@pytest.fixture
def failing_grade_id(client, school):
    response = upload(client, school, [
        {"studentId": school.student.id, "regularScore": 50, "midtermScore": 40, "finalScore": 30},
    ])
    return response.json()["data"]["gradeIds"][0]


class TestUploadGrades:
    def test_weighted_totals_and_makeup_flags(self, client, school, db):
        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 80, "midtermScore": 70, "finalScore": 50},
            {"studentId": school.classmate.id, "regularScore": 40, "midtermScore": 50, "finalScore": 60},
        ])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["gradesUploaded"] == 2
        assert data["needsMakeup"] == 1

        mine = db.query(GradeModel).filter(GradeModel.student_id == school.student.id).one()
        assert mine.total_score == pytest.approx(68.0)
        assert mine.needs_makeup is False
        assert mine.teacher_id == school.teacher.id

    def test_course_without_midterm_stores_null_midterm(self, client, school, db):
        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 50, "midtermScore": 90, "finalScore": 40},
        ], course=school.course_no_midterm)

        assert response.status_code == 200
        grade = db.query(GradeModel).filter(GradeModel.course_id == school.course_no_midterm.id).one()
        assert grade.total_score == pytest.approx(44.0)
        assert grade.midterm_score is None
        assert grade.needs_makeup is True

    def test_reupload_overwrites(self, client, school, db):
        upload(client, school, [{"studentId": school.student.id, "regularScore": 10, "midtermScore": 10, "finalScore": 10}])
        upload(client, school, [{"studentId": school.student.id, "regularScore": 90, "midtermScore": 90, "finalScore": 90}])

        rows = db.query(GradeModel).filter(GradeModel.student_id == school.student.id).all()
        assert len(rows) == 1
        assert rows[0].total_score == pytest.approx(90.0)
        assert rows[0].needs_makeup is False

    def test_missing_midterm_rejected(self, client, school, db):
        response = upload(client, school, [{"studentId": school.student.id, "regularScore": 80, "finalScore": 70}])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"
        assert db.query(GradeModel).count() == 0

    def test_score_above_hundred_is_validation_error(self, client, school):
        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 101, "midtermScore": 70, "finalScore": 70},
        ])
        assert response.status_code == 422

    def test_other_teacher_cannot_upload(self, client, school):
        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 80, "midtermScore": 70, "finalScore": 50},
        ], headers=school.other_teacher_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def _lee_teaches_math(self, db, school, school_class, day):
        db.add(ScheduleModel(course_id=school.course.id, teacher_id=school.other_teacher.id,
                             class_id=school_class.id, classroom_id=school.classroom.id,
                             semester_id=school.semester.id, day_of_week=day, period_start=1, period_end=1))
        db.commit()

    def test_teacher_of_another_class_cannot_upload(self, client, school, db):
        self._lee_teaches_math(db, school, school.other_class, day=4)
        upload(client, school, [{"studentId": school.student.id, "regularScore": 90, "midtermScore": 90, "finalScore": 90}])

        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 10, "midtermScore": 10, "finalScore": 10},
        ], headers=school.other_teacher_headers)

        assert response.status_code == 403
        grade = db.query(GradeModel).filter(GradeModel.student_id == school.student.id).one()
        db.refresh(grade)
        assert grade.total_score == pytest.approx(90.0)
        assert grade.teacher_id == school.teacher.id

    def test_grade_owned_by_another_teacher_is_kept(self, client, school, db):
        self._lee_teaches_math(db, school, school.school_class, day=5)
        upload(client, school, [{"studentId": school.student.id, "regularScore": 90, "midtermScore": 90, "finalScore": 90}])

        response = upload(client, school, [
            {"studentId": school.student.id, "regularScore": 10, "midtermScore": 10, "finalScore": 10},
        ], headers=school.other_teacher_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        grade = db.query(GradeModel).filter(GradeModel.student_id == school.student.id).one()
        db.refresh(grade)
        assert grade.total_score == pytest.approx(90.0)

    def test_unknown_student(self, client, school):
        response = upload(client, school, [
            {"studentId": 9999, "regularScore": 80, "midtermScore": 70, "finalScore": 50},
        ])
        assert response.status_code == 404


class TestRosterAndSchedule:
    def test_schedule_for_current_semester(self, client, school):
        response = client.get("/api/teacher/schedule", headers=school.teacher_headers)

        assert response.status_code == 200
        slots = response.json()["data"]
        assert [s["courseCode"] for s in slots] == ["MATH3", "ART3"]
        assert slots[0]["className"] == "Grade 3 Class 1"

    def test_class_students_for_taught_class(self, client, school):
        response = client.get(
            "/api/teacher/class-students", params={"classId": school.school_class.id}, headers=school.teacher_headers
        )

        assert response.status_code == 200
        assert [s["studentNumber"] for s in response.json()["data"]] == ["S001", "S002"]

    def test_class_students_for_other_class(self, client, school):
        response = client.get(
            "/api/teacher/class-students", params={"classId": school.other_class.id}, headers=school.teacher_headers
        )
        assert response.status_code == 403


class TestRequests:
    def test_reschedule_request_on_own_slot(self, client, school, db):
        response = client.post("/api/teacher/reschedule-request", headers=school.teacher_headers, json={
            "scheduleId": school.schedule.id, "reason": "School trip", "newDayOfWeek": 3,
        })

        assert response.status_code == 200
        request_id = response.json()["data"]["requestId"]
        stored = db.get(RescheduleModel, request_id)
        assert stored.status == "pending"
        assert stored.teacher_id == school.teacher.id

        listed = client.get("/api/teacher/requests", headers=school.teacher_headers).json()["data"]
        assert [r["id"] for r in listed["rescheduleRequests"]] == [request_id]

    def test_reschedule_to_unknown_classroom(self, client, school, db):
        response = client.post("/api/teacher/reschedule-request", headers=school.teacher_headers, json={
            "scheduleId": school.schedule.id, "reason": "Room change", "newClassroomId": 9999,
        })

        assert response.status_code == 404
        assert db.query(RescheduleModel).count() == 0

    def test_reschedule_request_on_foreign_slot(self, client, school):
        response = client.post("/api/teacher/reschedule-request", headers=school.other_teacher_headers, json={
            "scheduleId": school.schedule.id, "reason": "Not mine",
        })
        assert response.status_code == 403

    def test_substitute_must_be_someone_else(self, client, school):
        response = client.post("/api/teacher/substitute-request", headers=school.teacher_headers, json={
            "scheduleId": school.schedule.id, "substituteTeacherId": school.teacher.id,
            "reason": "Sick", "substituteDate": "2026-10-20",
        })
        assert response.status_code == 400

    def test_substitute_request(self, client, school):
        response = client.post("/api/teacher/substitute-request", headers=school.teacher_headers, json={
            "scheduleId": school.schedule.id, "substituteTeacherId": school.other_teacher.id,
            "reason": "Sick", "substituteDate": "2026-10-20",
        })

        assert response.status_code == 200
        listed = client.get("/api/teacher/requests", headers=school.teacher_headers).json()["data"]
        assert listed["substituteRequests"][0]["substituteTeacherName"] == "Lee Teacher"


class TestMakeupScore:
    def test_lists_failing_students(self, client, school, failing_grade_id):
        response = client.get("/api/teacher/makeup-students", headers=school.teacher_headers, params={
            "courseId": school.course.id, "semesterId": school.semester.id,
        })

        assert response.status_code == 200
        assert [r["gradeId"] for r in response.json()["data"]] == [failing_grade_id]

    def test_rejected_request_blocks_makeup_score(self, client, school, db, failing_grade_id):
        grade = db.get(GradeModel, failing_grade_id)
        grade.makeup_approved = False
        db.commit()

        response = client.post("/api/teacher/makeup-score", headers=school.teacher_headers, json={
            "gradeId": failing_grade_id, "makeupScore": 80,
        })

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_makeup_score_after_approval(self, client, school, db, failing_grade_id):
        grade = db.get(GradeModel, failing_grade_id)
        grade.makeup_approved = True
        db.commit()

        response = client.post("/api/teacher/makeup-score", headers=school.teacher_headers, json={
            "gradeId": failing_grade_id, "makeupScore": 65,
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["makeupPassed"] is True
        assert data["state"] == "score_pending"

    def test_unknown_grade(self, client, school):
        response = client.post("/api/teacher/makeup-score", headers=school.teacher_headers, json={
            "gradeId": 9999, "makeupScore": 65,
        })
        assert response.status_code == 404
