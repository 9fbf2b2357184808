"""
Tests for services/report_service.py: report payloads and the Excel export.
"""

import pandas as pd
import pytest

from services.marks_service import enter_batch_marks
from services.report_service import (
    build_class_workbook, class_report_rows, generate_class_report,
    generate_student_report, workbook_filename
)


@pytest.fixture
def marked(school):
    """Mathematics marks 95, 70 and 40 for the three O-Level students."""
    entries = [
        {"student_id": s.student_id, "marks_obtained": m, "comment": "ok" if m > 50 else None}
        for s, m in zip(school.o_students, [95, 70, 40])
    ]
    outcome = enter_batch_marks(
        school.o_class.class_id, school.core[0].subject_id, school.exam.exam_id,
        school.year.academic_year_id, entries, school.teacher.user_id
    )
    assert outcome["success"]
    return school


class TestStudentReport:

    def test_payload(self, app, marked):
        student = marked.o_students[1]
        report = generate_student_report(student.student_id, marked.exam.exam_id)["data"]

        assert report["school"] == {
            "name": app.config["SCHOOL_NAME"],
            "address": app.config["SCHOOL_ADDRESS"],
        }
        assert report["exam"] == {
            "exam_id": marked.exam.exam_id,
            "name": "Midterm",
            "term": "Term 1",
            "academic_year": "2026",
        }
        assert report["class"]["name"] == "Form 2"
        assert report["results"] == [{
            "subject": "Mathematics",
            "code": "MATH",
            "marks": 70.0,
            "grade": "B",
            "points": 2,
            "remarks": "Very Good",
            "comments": "ok",
            "is_principal": False,
        }]

    def test_summary_includes_position(self, marked):
        report = generate_student_report(marked.o_students[2].student_id, marked.exam.exam_id)["data"]
        summary = report["summary"]
        assert summary["division"] is None
        assert summary["missing_subjects"] == 6
        assert summary["out_of"] == 3
        # Nobody has a division, so the best average ranks first
        assert summary["position"] == 3
        assert report["results"][0]["comments"] == ""

    def test_grade_key(self, marked):
        report = generate_student_report(marked.o_students[0].student_id, marked.exam.exam_id)["data"]
        assert [g["grade"] for g in report["grade_key"]] == ["A", "B", "C", "D", "F"]

    def test_unknown_student(self, marked):
        assert generate_student_report(9999, marked.exam.exam_id)["error"] == "not_found"


class TestClassReport:

    def test_payload(self, marked):
        report = generate_class_report(marked.o_class.class_id, marked.exam.exam_id)["data"]
        assert [s["admission_no"] for s in report["students"]] == ["O001", "O002", "O003"]
        assert report["students"][0]["grades"] == {"MATH": "A"}
        assert report["division_stats"]["N/A"] == 3
        assert report["class"]["education_level"] == "O_LEVEL"

    def test_rows(self, marked):
        report = generate_class_report(marked.o_class.class_id, marked.exam.exam_id)["data"]
        rows = class_report_rows(report)
        assert len(rows) == 3
        assert rows[0]["Position"] == 1
        assert rows[0]["MATH"] == "A"
        assert rows[0]["ENG"] == "-"
        assert rows[0]["Division"] == "N/A"

    def test_workbook(self, marked):
        report = generate_class_report(marked.o_class.class_id, marked.exam.exam_id)["data"]
        output = build_class_workbook(report)
        sheets = pd.read_excel(output, sheet_name=None, engine="openpyxl")

        assert list(sheets) == ["Results", "Subjects", "Divisions"]
        assert list(sheets["Results"]["Admission No"]) == ["O001", "O002", "O003"]
        assert len(sheets["Subjects"]) == len(marked.core) + len(marked.optional)
        assert workbook_filename(report) == "Form_2_Midterm_results.xlsx"
