"""
Aggregates entered results into per-student summaries and class rankings.

O-Level divisions use the best seven subjects of a student; A-Level
divisions use the best three principal subjects. Students without enough
results get no division and sort after everyone who has one.
"""

import logging

from models import Class, Exam, Result, Student
from models.enums import EducationLevel
from services import grading
from services.authorization import require_class_teacher
from services.errors import ValidationError, ok, require_fields, service_outcome
from utils.db import get_or_404

logger = logging.getLogger(__name__)

NO_DIVISION_BUCKET = "N/A"
DIVISION_BUCKETS = grading.DIVISIONS + [NO_DIVISION_BUCKET]
DIVISION_RANK = {division: rank for rank, division in enumerate(grading.DIVISIONS)}


def _level(value):
    level = EducationLevel.parse(value)
    if level is None:
        raise ValidationError(f"Unsupported education level: {value}")
    return level


def _result_row(result):
    subject = result.subject
    return {
        "result_id": result.result_id,
        "subject_id": result.subject_id,
        "subject_name": subject.subject_name if subject else None,
        "subject_code": subject.subject_code if subject else None,
        "marks_obtained": result.marks_obtained,
        "grade": result.grade,
        "points": result.points,
        "remarks": grading.get_remarks(result.grade, result.education_level),
        "is_principal": result.is_principal,
        "is_subsidiary": result.is_subsidiary,
        "comment": result.comment,
    }


def _subject_name(result):
    return result.subject.subject_name if result.subject else ""


def order_results(results, level):
    if level is EducationLevel.A_LEVEL:
        return sorted(results, key=lambda r: (not r.is_principal, _subject_name(r)))
    return sorted(results, key=_subject_name)


def summarize(results, level):
    """Division summary for one student's results in one exam.

    ``results`` is expected in display order; ties on points keep that order
    when picking the best subjects.
    """
    level = _level(level)
    if level is EducationLevel.O_LEVEL:
        counted = list(results)
        needed = grading.O_LEVEL_BEST_SUBJECTS
    else:
        counted = [r for r in results if r.is_principal]
        needed = grading.A_LEVEL_BEST_PRINCIPALS

    summary = {
        "total_points": None,
        "division": None,
        "best_subjects": [],
        "average_marks": grading.average_marks(results),
        "missing_subjects": max(needed - len(counted), 0),
        "total_subjects": len(results),
    }
    if len(counted) < needed:
        return summary

    best = grading.select_best(counted, needed)
    total_points = sum(r.points for r in best)
    summary["total_points"] = total_points
    summary["division"] = grading.calculate_division(total_points, level)
    summary["best_subjects"] = [_result_row(r) for r in best]
    return summary


def student_summary(student, results):
    level = _level(student.education_level)
    ordered = order_results(results, level)
    summary = summarize(ordered, level)
    summary["results"] = [_result_row(r) for r in ordered]
    return summary


@service_outcome("student results")
def get_student_results(student_id, exam_id, teacher_id=None):
    require_fields({"student_id": student_id, "exam_id": exam_id})
    student = get_or_404(Student, student_id, "Student")
    get_or_404(Exam, exam_id, "Exam")
    if teacher_id is not None:
        require_class_teacher(teacher_id, student.class_id)

    results = Result.query.filter_by(student_id=student_id, exam_id=exam_id).all()
    data = student_summary(student, results)
    data["student_id"] = student.student_id
    data["education_level"] = student.education_level

    logger.info(
        "Student %s exam %s: %s results, division %s",
        student_id, exam_id, len(results), data["division"]
    )
    return ok(data)


def ranking_key(row):
    division = row["division"]
    division_rank = DIVISION_RANK.get(division, len(DIVISION_RANK))
    total_points = row["total_points"] if row["total_points"] is not None else float("inf")
    return (division_rank, total_points, -row["average_marks"])


def rank_students(rows):
    """Sort rows best first and number them; equal keys keep their input order."""
    ranked = sorted(rows, key=ranking_key)
    for position, row in enumerate(ranked, start=1):
        row["position"] = position
    return ranked


def division_stats(rows):
    stats = {bucket: 0 for bucket in DIVISION_BUCKETS}
    for row in rows:
        division = row["division"]
        stats[division if division in stats else NO_DIVISION_BUCKET] += 1
    return stats


def subject_stats(subjects, results, level):
    letters = grading.grade_letters(level)
    by_subject = {}
    for result in results:
        by_subject.setdefault(result.subject_id, []).append(result)

    stats = []
    for subject in subjects:
        subject_results = by_subject.get(subject.subject_id, [])
        distribution = {letter: 0 for letter in letters}
        for result in subject_results:
            if result.grade in distribution:
                distribution[result.grade] += 1
        stats.append({
            "subject_id": subject.subject_id,
            "subject_name": subject.subject_name,
            "subject_code": subject.subject_code,
            "total_students": len(subject_results),
            "average_marks": grading.average_marks(subject_results),
            "grade_distribution": distribution,
        })
    return stats


def _class_subjects(class_row, results):
    subjects = list(class_row.subjects)
    if subjects:
        return sorted(subjects, key=lambda s: s.subject_name)
    seen = {}
    for result in results:
        if result.subject is not None:
            seen.setdefault(result.subject_id, result.subject)
    return sorted(seen.values(), key=lambda s: s.subject_name)


def build_class_results(class_row, exam):
    level = _level(class_row.education_level)

    students = Student.query.filter_by(
        class_id=class_row.class_id,
        education_level=level.value,
        is_active=True
    ).order_by(Student.admission_no.asc()).all()

    student_ids = [s.student_id for s in students]
    results = Result.query.filter(
        Result.exam_id == exam.exam_id,
        Result.student_id.in_(student_ids)
    ).all() if student_ids else []

    by_student = {}
    for result in results:
        by_student.setdefault(result.student_id, []).append(result)

    rows = []
    for student in students:
        summary = student_summary(student, by_student.get(student.student_id, []))
        summary.update({
            "student_id": student.student_id,
            "admission_no": student.admission_no,
            "student_name": student.full_name,
        })
        rows.append(summary)

    ranked = rank_students(rows)
    return {
        "class_id": class_row.class_id,
        "class_name": class_row.class_name,
        "education_level": level.value,
        "exam_id": exam.exam_id,
        "students": ranked,
        "division_stats": division_stats(ranked),
        "subject_stats": subject_stats(_class_subjects(class_row, results), results, level),
    }


@service_outcome("class results")
def get_class_results(class_id, exam_id, teacher_id=None):
    require_fields({"class_id": class_id, "exam_id": exam_id})
    class_row = get_or_404(Class, class_id, "Class")
    exam = get_or_404(Exam, exam_id, "Exam")
    if teacher_id is not None:
        require_class_teacher(teacher_id, class_id)

    data = build_class_results(class_row, exam)
    logger.info(
        "Class %s exam %s: ranked %s students",
        class_id, exam_id, len(data["students"])
    )
    return ok(data)
