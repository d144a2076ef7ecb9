"""Admin master data: users, courses, classes, classrooms, schedules and semesters."""

from models.grades import Grade as GradeModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel
from models.users import User as UserModel


class TestUsers:
    def test_create_student_user(self, client, school, db):
        response = client.post("/api/admin/create-user", headers=school.admin_headers, json={
            "username": "haneul", "password": "secret123", "role": "student", "name": "Haneul",
            "additionalInfo": {"studentNumber": "S003", "classId": school.school_class.id, "grade": 3},
        })

        assert response.status_code == 200
        user_id = response.json()["data"]["userId"]
        student = db.query(StudentModel).filter(StudentModel.user_id == user_id).one()
        assert student.student_number == "S003"

        login = client.post("/api/login", json={"username": "haneul", "password": "secret123"})
        assert login.status_code == 200

    def test_create_teacher_user(self, client, school):
        response = client.post("/api/admin/create-user", headers=school.admin_headers, json={
            "username": "park", "password": "secret123", "role": "teacher", "name": "Park",
            "additionalInfo": {"teacherNumber": "T003", "department": "Science"},
        })

        assert response.status_code == 200
        teachers = client.get("/api/admin/teachers", headers=school.admin_headers).json()["data"]
        assert [t["teacherNumber"] for t in teachers] == ["T001", "T002", "T003"]

    def test_student_needs_profile(self, client, school):
        response = client.post("/api/admin/create-user", headers=school.admin_headers, json={
            "username": "noinfo", "password": "secret123", "role": "student", "name": "No Info",
        })
        assert response.status_code == 422

    def test_duplicate_username(self, client, school):
        response = client.post("/api/admin/create-user", headers=school.admin_headers, json={
            "username": "kim", "password": "secret123", "role": "admin", "name": "Another Kim",
        })
        assert response.status_code == 409

    def test_batch_reports_each_row(self, client, school, db):
        class_id = school.school_class.id
        response = client.post("/api/admin/batch-create-students", headers=school.admin_headers, json={
            "students": [
                {"username": "new1", "password": "secret123", "name": "New One",
                 "studentNumber": "S010", "classId": class_id, "grade": 3},
                {"username": "minji", "password": "secret123", "name": "Duplicate",
                 "studentNumber": "S011", "classId": class_id, "grade": 3},
                {"username": "new2", "password": "secret123", "name": "New Two",
                 "studentNumber": "S012", "classId": 9999, "grade": 3},
                {"username": "new3", "password": "secret123", "name": "New Three",
                 "studentNumber": "S013", "classId": class_id, "grade": 3},
            ],
        })

        assert response.status_code == 200
        results = response.json()["data"]
        assert [r["success"] for r in results] == [True, False, False, True]
        assert "already exists" in results[1]["error"]
        assert db.query(UserModel).filter(UserModel.username.in_(["new1", "new2", "new3"])).count() == 2


class TestCourses:
    def test_create_and_list(self, client, school):
        response = client.post("/api/admin/courses", headers=school.admin_headers, json={
            "name": "History", "code": "HIST3", "credits": 2, "hasMidtermExam": False,
        })
        assert response.status_code == 200

        codes = [c["code"] for c in client.get("/api/admin/courses", headers=school.admin_headers).json()["data"]]
        assert codes == ["ART3", "HIST3", "MATH3"]

    def test_duplicate_code(self, client, school):
        response = client.post("/api/admin/courses", headers=school.admin_headers,
                               json={"name": "Math again", "code": "MATH3"})
        assert response.status_code == 409

    def test_policy_toggle_reports_stale_grades(self, client, school, db):
        db.add(GradeModel(
            student_id=school.student.id, course_id=school.course.id, semester_id=school.semester.id,
            teacher_id=school.teacher.id, regular_score=80, midterm_score=70, final_score=50,
            total_score=68, needs_makeup=False,
        ))
        db.commit()

        response = client.put(f"/api/admin/courses/{school.course.id}/settings", headers=school.admin_headers,
                              json={"hasMidtermExam": False})

        assert response.status_code == 200
        assert response.json()["data"] == {"courseId": school.course.id, "hasMidtermExam": False, "staleGrades": 1}
        grade = db.query(GradeModel).one()
        assert grade.total_score == 68

    def test_settings_for_unknown_course(self, client, school):
        response = client.put("/api/admin/courses/9999/settings", headers=school.admin_headers,
                              json={"hasMidtermExam": True})
        assert response.status_code == 404


class TestClassesAndRooms:
    def test_class_default_name(self, client, school):
        response = client.post("/api/admin/classes", headers=school.admin_headers,
                               json={"grade": 4, "classNumber": 1})
        assert response.status_code == 200

        classes = client.get("/api/admin/classes", headers=school.admin_headers).json()["data"]
        assert classes[-1]["name"] == "Grade 4 Class 1"

    def test_duplicate_class(self, client, school):
        response = client.post("/api/admin/classes", headers=school.admin_headers,
                               json={"grade": 3, "classNumber": 1})
        assert response.status_code == 409

    def test_classrooms(self, client, school):
        created = client.post("/api/admin/classrooms", headers=school.admin_headers,
                              json={"roomNumber": "Lab-1", "building": "Science", "type": "lab"})
        assert created.status_code == 200

        duplicate = client.post("/api/admin/classrooms", headers=school.admin_headers,
                                json={"roomNumber": "301", "building": "Main"})
        assert duplicate.status_code == 409


class TestSchedules:
    def _slot(self, school, **overrides):
        body = {
            "courseId": school.course.id, "teacherId": school.other_teacher.id, "classId": school.other_class.id,
            "classroomId": school.classroom.id, "semesterId": school.semester.id,
            "dayOfWeek": 5, "periodStart": 1, "periodEnd": 2,
        }
        body.update(overrides)
        return body

    def test_create_list_delete(self, client, school):
        created = client.post("/api/admin/schedules", headers=school.admin_headers, json=self._slot(school))
        assert created.status_code == 200
        schedule_id = created.json()["data"]["id"]

        listed = client.get("/api/admin/schedules", headers=school.admin_headers,
                            params={"semesterId": school.semester.id}).json()["data"]
        assert schedule_id in [s["id"] for s in listed]

        deleted = client.delete(f"/api/admin/schedules/{schedule_id}", headers=school.admin_headers)
        assert deleted.status_code == 200
        again = client.delete(f"/api/admin/schedules/{schedule_id}", headers=school.admin_headers)
        assert again.status_code == 404

    def test_overlapping_classroom_slot(self, client, school):
        # room 301 already holds Monday periods 1-2
        response = client.post("/api/admin/schedules", headers=school.admin_headers,
                               json=self._slot(school, dayOfWeek=1, periodStart=2, periodEnd=3))
        assert response.status_code == 409

    def test_periods_must_be_ordered(self, client, school):
        response = client.post("/api/admin/schedules", headers=school.admin_headers,
                               json=self._slot(school, periodStart=4, periodEnd=2))
        assert response.status_code == 422


class TestSemesters:
    def test_new_current_semester_clears_previous(self, client, school, db):
        response = client.post("/api/admin/semesters", headers=school.admin_headers, json={
            "name": "2027 Spring", "startDate": "2027-03-01", "endDate": "2027-08-31", "isCurrent": True,
        })
        assert response.status_code == 200

        current = db.query(SemesterModel).filter(SemesterModel.is_current.is_(True)).all()
        assert [s.name for s in current] == ["2027 Spring"]

        listed = client.get("/api/admin/semesters", headers=school.admin_headers).json()["data"]
        assert [s["name"] for s in listed] == ["2027 Spring", "2026 Fall"]
