"""
Tests for the JSON blueprints: status codes, role checks and teacher authorization.
"""

from io import BytesIO

import pandas as pd

from extensions import db
from models import Class, Result, Student
from utils.seed_data import run_seed


def _entry(school, student, subject, marks):
    return {
        "student_id": student.student_id,
        "exam_id": school.exam.exam_id,
        "subject_id": subject.subject_id,
        "class_id": student.class_id,
        "academic_year_id": school.year.academic_year_id,
        "marks_obtained": marks,
    }


def _form_three_student(school):
    form_three = Class(
        class_name="Form 3",
        education_level="O_LEVEL",
        academic_year_id=school.year.academic_year_id
    )
    db.session.add(form_three)
    db.session.flush()
    student = Student(admission_no="O101", first_name="Fatuma", last_name="Student",
                      education_level="O_LEVEL", class_id=form_three.class_id)
    db.session.add(student)
    db.session.commit()
    return student


class TestAuth:

    def test_login_and_logout(self, client, school):
        response = client.post("/login", json={"username": "teacher", "password": "secret123"})
        assert response.status_code == 200
        assert response.get_json()["data"]["role"] == "TEACHER"
        assert client.post("/logout").status_code == 200

    def test_bad_password(self, client, school):
        response = client.post("/login", json={"username": "teacher", "password": "wrong"})
        assert response.status_code == 401

    def test_missing_credentials(self, client, school):
        assert client.post("/login", json={}).status_code == 400

    def test_login_required(self, client, school):
        response = client.post("/marks/enter", json={})
        assert response.status_code == 401

    def test_seeded_admin_can_log_in(self, client, app):
        run_seed()
        response = client.post("/login", json={"username": "admin", "password": "admin123"})
        assert response.get_json()["data"]["role"] == "ADMIN"


class TestMarksRoutes:

    def test_teacher_enters_assigned_subject(self, client, school, login):
        login(school.teacher)
        response = client.post("/marks/enter", json=_entry(school, school.o_students[0], school.core[0], 77))
        assert response.status_code == 200
        body = response.get_json()
        assert body["data"]["grade"] == "A"
        assert body["data"]["entered_by"] == school.teacher.user_id

    def test_teacher_blocked_on_other_subject(self, client, school, login):
        login(school.teacher)
        response = client.post("/marks/enter", json=_entry(school, school.o_students[0], school.core[1], 77))
        assert response.status_code == 403
        assert Result.query.count() == 0

    def test_teacher_cannot_mark_student_of_another_class(self, client, school, login):
        outsider = _form_three_student(school)
        login(school.teacher)
        payload = _entry(school, outsider, school.core[0], 77)
        payload["class_id"] = school.o_class.class_id

        response = client.post("/marks/enter", json=payload)
        assert response.status_code == 400
        assert response.get_json()["fields"] == ["class_id"]
        assert Result.query.count() == 0

    def test_batch_rejects_student_of_another_class(self, client, school, login):
        outsider = _form_three_student(school)
        login(school.teacher)
        response = client.post("/marks/batch", json={
            "class_id": school.o_class.class_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
            "academic_year_id": school.year.academic_year_id,
            "student_marks": [
                {"student_id": school.o_students[0].student_id, "marks_obtained": 50},
                {"student_id": outsider.student_id, "marks_obtained": 60},
            ],
        })
        assert response.status_code == 207
        errors = response.get_json()["data"]["errors"]
        assert [e["student_id"] for e in errors] == [outsider.student_id]
        assert Result.query.filter_by(student_id=outsider.student_id).count() == 0

    def test_admin_bypasses_assignment(self, client, school, login):
        login(school.admin)
        response = client.post("/marks/enter", json=_entry(school, school.o_students[0], school.core[1], 77))
        assert response.status_code == 200

    def test_validation_status(self, client, school, login):
        login(school.admin)
        response = client.post("/marks/enter", json=_entry(school, school.o_students[0], school.core[0], 101))
        assert response.status_code == 400
        assert response.get_json()["error"] == "validation"

    def test_not_found_status(self, client, school, login):
        login(school.admin)
        payload = _entry(school, school.o_students[0], school.core[0], 50)
        payload["exam_id"] = 9999
        assert client.post("/marks/enter", json=payload).status_code == 404

    def test_batch_partial_failure(self, client, school, login):
        login(school.teacher)
        student_marks = [
            {"student_id": school.o_students[0].student_id, "marks_obtained": 50},
            {"student_id": school.o_students[1].student_id, "marks_obtained": -5},
        ]
        response = client.post("/marks/batch", json={
            "class_id": school.o_class.class_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
            "academic_year_id": school.year.academic_year_id,
            "student_marks": student_marks,
        })
        assert response.status_code == 207
        body = response.get_json()
        assert len(body["data"]["results"]) == 1
        assert len(body["data"]["errors"]) == 1

    def test_check_existing(self, client, school, login):
        login(school.teacher)
        response = client.get("/marks/check", query_string={
            "class_id": school.o_class.class_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
        })
        assert response.status_code == 200
        assert response.get_json()["data"]["total_students"] == 3

    def test_eligibility(self, client, school, login):
        login(school.academic)
        response = client.get("/marks/eligibility", query_string={
            "student_id": school.o_students[0].student_id,
            "subject_id": school.optional[0].subject_id,
        })
        assert response.status_code == 200
        assert response.get_json()["data"]["is_eligible"] is False

    def test_teacher_subjects(self, client, school, login):
        login(school.teacher)
        response = client.get("/marks/teacher-subjects", query_string={"class_id": school.o_class.class_id})
        assert [s["code"] for s in response.get_json()["data"]] == ["MATH"]

    def test_student_marks_for_assigned_subject(self, client, school, login):
        login(school.teacher)
        response = client.get("/marks/student", query_string={
            "student_id": school.o_students[0].student_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
        })
        assert response.status_code == 200

    def test_student_marks_for_unassigned_subject(self, client, school, login):
        login(school.teacher)
        response = client.get("/marks/student", query_string={
            "student_id": school.o_students[0].student_id,
            "subject_id": school.core[1].subject_id,
            "exam_id": school.exam.exam_id,
        })
        assert response.status_code == 403

    def test_student_marks_in_another_class(self, client, school, login):
        outsider = _form_three_student(school)
        login(school.teacher)
        response = client.get("/marks/student", query_string={
            "student_id": outsider.student_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
        })
        assert response.status_code == 403

    def test_teacher_cannot_delete(self, client, school, login):
        login(school.teacher)
        response = client.delete("/marks/", query_string={
            "student_id": school.o_students[0].student_id,
            "subject_id": school.core[0].subject_id,
            "exam_id": school.exam.exam_id,
        })
        assert response.status_code == 403

    def test_upload(self, client, school, login):
        login(school.teacher)
        sheet = BytesIO()
        pd.DataFrame([{"Admission No": "O001", "Marks": 64}]).to_excel(sheet, index=False, engine="openpyxl")
        sheet.seek(0)

        response = client.post("/marks/upload", data={
            "file": (sheet, "marks.xlsx"),
            "class_id": str(school.o_class.class_id),
            "subject_id": str(school.core[0].subject_id),
            "exam_id": str(school.exam.exam_id),
            "academic_year_id": str(school.year.academic_year_id),
        }, content_type="multipart/form-data")
        assert response.status_code == 200
        assert Result.query.one().grade == "C"


class TestResultsRoutes:

    def test_class_results(self, client, school, login):
        login(school.academic)
        response = client.get(f"/results/class/{school.o_class.class_id}/{school.exam.exam_id}")
        assert response.status_code == 200
        assert set(response.get_json()["data"]) >= {"students", "division_stats", "subject_stats"}

    def test_subject_teacher_cannot_read_class_results(self, client, school, login):
        login(school.teacher)
        class_id, exam_id = school.o_class.class_id, school.exam.exam_id
        assert client.get(f"/results/class/{class_id}/{exam_id}").status_code == 403
        assert client.get(f"/results/report/class/{class_id}/{exam_id}").status_code == 403

    def test_subject_teacher_cannot_read_student_results(self, client, school, login):
        login(school.teacher)
        student_id, exam_id = school.o_students[0].student_id, school.exam.exam_id
        assert client.get(f"/results/student/{student_id}/{exam_id}").status_code == 403
        assert client.get(f"/results/report/student/{student_id}/{exam_id}").status_code == 403

    def test_class_teacher_reads_own_class_only(self, client, school, login):
        school.o_class.class_teacher_id = school.other_teacher.user_id
        db.session.commit()
        login(school.other_teacher)

        exam_id = school.exam.exam_id
        assert client.get(f"/results/class/{school.o_class.class_id}/{exam_id}").status_code == 200
        assert client.get(f"/results/student/{school.o_students[0].student_id}/{exam_id}").status_code == 200
        assert client.get(f"/results/class/{school.a_class.class_id}/{exam_id}").status_code == 403
        assert client.get(f"/results/report/student/{school.a_students[0].student_id}/{exam_id}").status_code == 403

    def test_student_report_not_found(self, client, school, login):
        login(school.academic)
        response = client.get(f"/results/report/student/9999/{school.exam.exam_id}")
        assert response.status_code == 404

    def test_excel_download(self, client, school, login):
        login(school.admin)
        response = client.get(f"/results/report/class/{school.o_class.class_id}/{school.exam.exam_id}/excel")
        assert response.status_code == 200
        assert response.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        assert "Form_2_Midterm_results.xlsx" in response.headers["Content-Disposition"]


class TestSelectionRoutes:

    def test_create_then_conflict(self, client, school, login):
        login(school.academic)
        payload = {
            "student_id": school.o_students[0].student_id,
            "academic_year_id": school.year.academic_year_id,
            "optional_subjects": [school.optional[0].subject_id],
        }
        assert client.post("/subject-selections/", json=payload).status_code == 201

        response = client.post("/subject-selections/", json=payload)
        assert response.status_code == 409
        assert response.get_json()["existing"]["optional_subjects"] == [school.optional[0].subject_id]

    def test_teacher_forbidden(self, client, school, login):
        login(school.teacher)
        response = client.post("/subject-selections/", json={})
        assert response.status_code == 403
