"""Report payloads and the class Excel sheet built from aggregated results."""

import logging
from io import BytesIO

import pandas as pd
from flask import current_app

from models import Class, Exam, Student
from services import grading
from services.authorization import require_class_teacher
from services.errors import ok, require_fields, service_outcome
from services.results_service import build_class_results, student_summary
from utils.db import get_or_404

logger = logging.getLogger(__name__)

EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def school_header():
    return {
        "name": current_app.config.get("SCHOOL_NAME"),
        "address": current_app.config.get("SCHOOL_ADDRESS"),
    }


def exam_header(exam):
    year = exam.academic_year
    return {
        "exam_id": exam.exam_id,
        "name": exam.name,
        "term": exam.term,
        "academic_year": year.name if year else None,
    }


def _report_row(row):
    return {
        "subject": row["subject_name"],
        "code": row["subject_code"],
        "marks": row["marks_obtained"],
        "grade": row["grade"],
        "points": row["points"],
        "remarks": row["remarks"],
        "comments": row["comment"] or "",
        "is_principal": row["is_principal"],
    }


@service_outcome("student report")
def generate_student_report(student_id, exam_id, teacher_id=None):
    require_fields({"student_id": student_id, "exam_id": exam_id})
    student = get_or_404(Student, student_id, "Student")
    exam = get_or_404(Exam, exam_id, "Exam")
    class_row = get_or_404(Class, student.class_id, "Class")
    if teacher_id is not None:
        require_class_teacher(teacher_id, class_row.class_id)

    # Position needs the whole class ranking
    class_results = build_class_results(class_row, exam)
    ranked = class_results["students"]
    entry = next((r for r in ranked if r["student_id"] == student.student_id), None)
    if entry is None:
        # Inactive or moved students are not ranked but still get a report
        entry = student_summary(student, [r for r in student.results if r.exam_id == exam.exam_id])
        entry["position"] = None

    report = {
        "school": school_header(),
        "student": {
            "student_id": student.student_id,
            "admission_no": student.admission_no,
            "name": student.full_name,
            "education_level": student.education_level,
            "combination": student.subject_combination.name if student.subject_combination else None,
        },
        "class": {"class_id": class_row.class_id, "name": class_row.class_name},
        "exam": exam_header(exam),
        "results": [_report_row(r) for r in entry["results"]],
        "summary": {
            "total_subjects": entry["total_subjects"],
            "total_points": entry["total_points"],
            "division": entry["division"],
            "average_marks": entry["average_marks"],
            "missing_subjects": entry["missing_subjects"],
            "position": entry["position"],
            "out_of": len(ranked),
            "best_subjects": [r["subject_name"] for r in entry["best_subjects"]],
        },
        "grade_key": grade_key(student.education_level),
    }
    logger.info("Generated report for student %s exam %s", student_id, exam_id)
    return ok(report)


@service_outcome("class report")
def generate_class_report(class_id, exam_id, teacher_id=None):
    require_fields({"class_id": class_id, "exam_id": exam_id})
    class_row = get_or_404(Class, class_id, "Class")
    exam = get_or_404(Exam, exam_id, "Exam")
    if teacher_id is not None:
        require_class_teacher(teacher_id, class_id)

    data = build_class_results(class_row, exam)
    students = [
        {
            "position": row["position"],
            "student_id": row["student_id"],
            "admission_no": row["admission_no"],
            "name": row["student_name"],
            "total_subjects": row["total_subjects"],
            "total_points": row["total_points"],
            "division": row["division"],
            "average_marks": row["average_marks"],
            "grades": {r["subject_code"]: r["grade"] for r in row["results"]},
        }
        for row in data["students"]
    ]

    report = {
        "school": school_header(),
        "class": {
            "class_id": class_row.class_id,
            "name": class_row.class_name,
            "education_level": data["education_level"],
        },
        "exam": exam_header(exam),
        "students": students,
        "division_stats": data["division_stats"],
        "subject_stats": data["subject_stats"],
    }
    logger.info("Generated class report for class %s exam %s", class_id, exam_id)
    return ok(report)


def class_report_rows(report):
    """Flatten a class report into one row per student for the spreadsheet."""
    codes = [s["subject_code"] for s in report["subject_stats"]]
    rows = []
    for student in report["students"]:
        row = {
            "Position": student["position"],
            "Admission No": student["admission_no"],
            "Name": student["name"],
        }
        for code in codes:
            row[code] = student["grades"].get(code, "-")
        row["Total Points"] = student["total_points"]
        row["Division"] = student["division"] or "N/A"
        row["Average"] = student["average_marks"]
        rows.append(row)
    return rows


def build_class_workbook(report):
    """Write the class report to an in-memory xlsx with results and summary sheets."""
    results_df = pd.DataFrame(class_report_rows(report))

    stats_rows = []
    for stat in report["subject_stats"]:
        row = {
            "Subject": stat["subject_name"],
            "Code": stat["subject_code"],
            "Students": stat["total_students"],
            "Average": stat["average_marks"],
        }
        row.update(stat["grade_distribution"])
        stats_rows.append(row)
    stats_df = pd.DataFrame(stats_rows)

    divisions_df = pd.DataFrame(
        [{"Division": k, "Students": v} for k, v in report["division_stats"].items()]
    )

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        results_df.to_excel(writer, index=False, sheet_name="Results")
        stats_df.to_excel(writer, index=False, sheet_name="Subjects")
        divisions_df.to_excel(writer, index=False, sheet_name="Divisions")
    output.seek(0)
    return output


def workbook_filename(report):
    class_name = report["class"]["name"].replace(" ", "_")
    exam_name = report["exam"]["name"].replace(" ", "_")
    return f"{class_name}_{exam_name}_results.xlsx"


def grade_key(level):
    """Grade letters with their remarks, printed under report tables."""
    return [
        {"grade": grade, "min_marks": min_marks, "points": points, "remarks": remarks}
        for min_marks, grade, points, remarks in grading.grade_table(level)
    ]
