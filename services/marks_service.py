"""
Marks entry for O-Level and A-Level students.

A result is identified by (student, subject, exam). Entering marks for a key
that already has a result updates that row in place; the unique constraint
on the key plus a dialect-level upsert keep concurrent entries from creating
a second row.
"""

import logging

import pandas as pd
from sqlalchemy import insert, select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from models import AcademicYear, Class, Exam, Result, Student, Subject
from models.enums import EducationLevel
from services import grading
from services.authorization import require_teacher_authorization
from services.eligibility import is_eligible
from services.errors import (
    EligibilityWarning, NotFoundError, ServiceError, ValidationError,
    ok, require_fields, service_outcome
)
from utils.db import get_or_404, unit_of_work, utcnow

logger = logging.getLogger(__name__)

ENTRY_FIELDS = [
    "student_id", "exam_id", "subject_id", "class_id",
    "academic_year_id", "marks_obtained", "entered_by",
]
BATCH_FIELDS = ["class_id", "subject_id", "exam_id", "academic_year_id", "student_marks", "entered_by"]
NATURAL_KEY = ["student_id", "subject_id", "exam_id"]
UPDATABLE = [
    "marks_obtained", "grade", "points", "is_principal", "is_subsidiary",
    "comment", "updated_by", "updated_at",
]


def _upsert_statement(dialect, values):
    update_values = {name: values[name] for name in UPDATABLE}
    if dialect == "mysql":
        stmt = mysql_insert(Result).values(**values)
        return stmt.on_duplicate_key_update(**update_values)
    if dialect == "postgresql":
        stmt = postgresql_insert(Result).values(**values)
        return stmt.on_conflict_do_update(index_elements=NATURAL_KEY, set_=update_values)
    if dialect == "sqlite":
        stmt = sqlite_insert(Result).values(**values)
        return stmt.on_conflict_do_update(index_elements=NATURAL_KEY, set_=update_values)
    return None


def _fallback_upsert(session, values):
    key = {name: values[name] for name in NATURAL_KEY}
    existing = Result.query.filter_by(**key).first()
    if existing is None:
        savepoint = session.begin_nested()
        try:
            session.execute(insert(Result).values(**values))
            savepoint.commit()
            return
        except IntegrityError:
            # Another writer created the row between the check and the insert
            savepoint.rollback()
            existing = Result.query.filter_by(**key).one()
    for name in UPDATABLE:
        setattr(existing, name, values[name])
    session.flush()


def upsert_result(session, values):
    """Insert or update the result identified by the natural key in ``values``."""
    dialect = session.get_bind().dialect.name
    stmt = _upsert_statement(dialect, values)
    if stmt is None:
        _fallback_upsert(session, values)
    else:
        session.execute(stmt)

    key = {name: values[name] for name in NATURAL_KEY}
    return session.execute(
        select(Result).filter_by(**key).execution_options(populate_existing=True)
    ).scalar_one()


def _resolve_flags(student, subject, eligibility, is_principal, is_subsidiary):
    level = EducationLevel.parse(student.education_level)
    if level is not EducationLevel.A_LEVEL:
        return False, False
    if is_principal is not None or is_subsidiary is not None:
        principal = bool(is_principal)
        subsidiary = bool(is_subsidiary) and not principal
        return principal, subsidiary
    return eligibility.is_principal, eligibility.is_subsidiary


def _enter_mark(student_id, exam_id, subject_id, class_id, academic_year_id,
                marks_obtained, entered_by, comment=None, is_principal=None,
                is_subsidiary=None, grade=None, points=None):
    require_fields({
        "student_id": student_id,
        "exam_id": exam_id,
        "subject_id": subject_id,
        "class_id": class_id,
        "academic_year_id": academic_year_id,
        "marks_obtained": marks_obtained,
        "entered_by": entered_by,
    }, ENTRY_FIELDS)
    marks = grading.validate_marks(marks_obtained)

    student = get_or_404(Student, student_id, "Student")
    subject = get_or_404(Subject, subject_id, "Subject")
    get_or_404(Exam, exam_id, "Exam")
    class_row = get_or_404(Class, class_id, "Class")
    get_or_404(AcademicYear, academic_year_id, "Academic year")

    # Teacher authorization is granted per class, so the student must belong to it
    if student.class_id != class_row.class_id:
        raise ValidationError(
            f"Student {student_id} is not in class {class_id}",
            fields=["class_id"]
        )

    level = EducationLevel.parse(student.education_level)
    if level is None:
        raise ValidationError(f"Unsupported education level: {student.education_level}")

    eligibility = is_eligible(student, subject)
    if eligibility.is_blocking:
        raise ValidationError(
            f"Student {student_id} cannot receive marks for subject {subject_id}: {eligibility.reason}"
        )
    warnings = []
    if not eligibility.is_eligible:
        warnings.append(EligibilityWarning(student_id, subject_id, eligibility.reason))
        logger.warning(
            "Entering marks for student %s, subject %s despite: %s",
            student_id, subject_id, eligibility.reason
        )

    computed = grading.calculate_grade_and_points(marks, level)
    if grade is not None or points is not None:
        logger.debug(
            "Ignoring caller grade/points (%s/%s) for student %s; computed %s/%s",
            grade, points, student_id, computed["grade"], computed["points"]
        )

    principal, subsidiary = _resolve_flags(student, subject, eligibility, is_principal, is_subsidiary)
    now = utcnow()
    values = {
        "student_id": student_id,
        "subject_id": subject_id,
        "exam_id": exam_id,
        "class_id": class_id,
        "academic_year_id": academic_year_id,
        "marks_obtained": marks,
        "grade": computed["grade"],
        "points": computed["points"],
        "education_level": level.value,
        "is_principal": principal,
        "is_subsidiary": subsidiary,
        "comment": comment,
        "entered_by": entered_by,
        "updated_by": entered_by,
        "created_at": now,
        "updated_at": now,
    }

    with unit_of_work() as session:
        result = upsert_result(session, values)
        data = result.to_dict()

    logger.info(
        "Saved %s marks for student %s, subject %s, exam %s: %s (%s)",
        level.value, student_id, subject_id, exam_id, marks, computed["grade"]
    )
    return data, warnings


@service_outcome("marks entry")
def enter_mark(student_id, exam_id, subject_id, class_id, academic_year_id,
               marks_obtained, entered_by, comment=None, is_principal=None,
               is_subsidiary=None, grade=None, points=None):
    data, warnings = _enter_mark(
        student_id, exam_id, subject_id, class_id, academic_year_id,
        marks_obtained, entered_by, comment=comment, is_principal=is_principal,
        is_subsidiary=is_subsidiary, grade=grade, points=points
    )
    return ok(data, warnings=warnings)


@service_outcome("batch marks entry")
def enter_batch_marks(class_id, subject_id, exam_id, academic_year_id, student_marks, entered_by):
    require_fields({
        "class_id": class_id,
        "subject_id": subject_id,
        "exam_id": exam_id,
        "academic_year_id": academic_year_id,
        "student_marks": student_marks,
        "entered_by": entered_by,
    }, BATCH_FIELDS)
    if not isinstance(student_marks, (list, tuple)):
        raise ValidationError("student_marks must be a list", fields=["student_marks"])

    logger.info(
        "Entering batch marks for class %s, subject %s, exam %s (%s entries)",
        class_id, subject_id, exam_id, len(student_marks)
    )

    results = []
    errors = []
    warnings = []
    for entry in student_marks:
        if not isinstance(entry, dict):
            errors.append({"student_id": None, "error": "Invalid entry", "kind": "validation"})
            continue

        student_id = entry.get("student_id")
        marks = entry.get("marks_obtained")
        if student_id is None or marks is None or marks == "":
            errors.append({"student_id": student_id, "error": "Missing student_id or marks_obtained"})
            continue

        try:
            data, entry_warnings = _enter_mark(
                student_id, exam_id, subject_id, class_id, academic_year_id,
                marks, entered_by,
                comment=entry.get("comment"),
                is_principal=entry.get("is_principal"),
                is_subsidiary=entry.get("is_subsidiary")
            )
        except ServiceError as exc:
            errors.append({"student_id": student_id, "error": exc.message, "kind": exc.kind})
            continue
        except Exception:
            logger.exception("Unexpected error saving marks for student %s", student_id)
            errors.append({"student_id": student_id, "error": "Unexpected error saving marks", "kind": "internal"})
            continue

        results.append(data)
        warnings.extend(entry_warnings)

    logger.info("Batch marks entry completed: %s successful, %s failed", len(results), len(errors))
    outcome = ok(
        {"results": results, "errors": errors},
        message=f"Saved marks for {len(results)} students, failed for {len(errors)} students",
        warnings=warnings
    )
    outcome["success"] = not errors
    return outcome


def eligible_students(class_row, subject):
    """Students of the class who take ``subject``, ordered by name."""
    level = EducationLevel.parse(class_row.education_level)
    if level is None:
        raise ValidationError(f"Unsupported education level: {class_row.education_level}")

    students = Student.query.filter_by(
        class_id=class_row.class_id,
        education_level=level.value,
        is_active=True
    ).order_by(Student.first_name.asc(), Student.last_name.asc()).all()

    if level is EducationLevel.O_LEVEL and subject.is_core:
        return students
    return [s for s in students if is_eligible(s, subject).is_eligible]


@service_outcome("existing marks check")
def check_existing_marks(class_id, subject_id, exam_id, teacher_id=None):
    require_fields({"class_id": class_id, "subject_id": subject_id, "exam_id": exam_id})
    class_row = get_or_404(Class, class_id, "Class")
    subject = get_or_404(Subject, subject_id, "Subject")
    get_or_404(Exam, exam_id, "Exam")

    if teacher_id is not None:
        require_teacher_authorization(teacher_id, subject_id, class_id)

    students = eligible_students(class_row, subject)
    student_ids = [s.student_id for s in students]
    results = Result.query.filter(
        Result.subject_id == subject_id,
        Result.exam_id == exam_id,
        Result.student_id.in_(student_ids)
    ).all() if student_ids else []
    by_student = {r.student_id: r for r in results}

    rows = []
    for student in students:
        result = by_student.get(student.student_id)
        rows.append({
            "student": {
                "student_id": student.student_id,
                "admission_no": student.admission_no,
                "first_name": student.first_name,
                "last_name": student.last_name,
            },
            "result": result.to_dict() if result else None,
            "has_marks": result is not None,
        })

    total = len(students)
    progress = round(len(results) / total * 100) if total else 0
    logger.info(
        "Found %s of %s marks for subject %s in class %s, exam %s",
        len(results), total, subject_id, class_id, exam_id
    )
    return ok({
        "students_with_marks": rows,
        "total_students": total,
        "total_marks_entered": len(results),
        "progress": progress,
    })


@service_outcome("student marks check")
def check_student_marks(student_id, subject_id, exam_id, teacher_id=None):
    require_fields({"student_id": student_id, "subject_id": subject_id, "exam_id": exam_id})
    student = get_or_404(Student, student_id, "Student")

    if teacher_id is not None:
        require_teacher_authorization(teacher_id, subject_id, student.class_id)

    result = Result.query.filter_by(
        student_id=student_id,
        subject_id=subject_id,
        exam_id=exam_id
    ).first()

    return ok({
        "student_id": student.student_id,
        "student_name": student.full_name,
        "education_level": student.education_level,
        "has_existing_marks": result is not None,
        "result": result.to_dict() if result else None,
    })


@service_outcome("marks deletion")
def delete_mark(student_id, subject_id, exam_id):
    require_fields({"student_id": student_id, "subject_id": subject_id, "exam_id": exam_id})
    with unit_of_work() as session:
        result = Result.query.filter_by(
            student_id=student_id,
            subject_id=subject_id,
            exam_id=exam_id
        ).first()
        if result is None:
            raise NotFoundError("No marks recorded for this student, subject and exam")
        session.delete(result)

    logger.info("Deleted marks for student %s, subject %s, exam %s", student_id, subject_id, exam_id)
    return ok({"student_id": student_id, "subject_id": subject_id, "exam_id": exam_id})


def _clean_cell(value):
    if value is None or pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def read_marks_sheet(file):
    """Parse an uploaded marks sheet into ``[{admission_no, marks_obtained, comment}]``.

    The sheet needs "Admission No" and "Marks" columns; "Comment" is optional.
    """
    try:
        df = pd.read_excel(file)
    except Exception as exc:
        raise ValidationError(f"Could not read marks sheet: {exc}") from exc

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in ("admission no", "marks") if c not in df.columns]
    if missing:
        raise ValidationError(
            f"Marks sheet is missing columns: {', '.join(missing)}",
            fields=missing
        )

    rows = []
    for _, row in df.iterrows():
        admission_no = _clean_cell(row.get("admission no"))
        if admission_no is None:
            continue
        rows.append({
            "admission_no": str(admission_no),
            "marks_obtained": _clean_cell(row.get("marks")),
            "comment": _clean_cell(row.get("comment")),
        })
    return rows


@service_outcome("marks sheet import")
def import_marks_from_excel(file, class_id, subject_id, exam_id, academic_year_id, entered_by):
    require_fields({
        "class_id": class_id,
        "subject_id": subject_id,
        "exam_id": exam_id,
        "academic_year_id": academic_year_id,
        "entered_by": entered_by,
    })
    rows = read_marks_sheet(file)
    if not rows:
        raise ValidationError("Marks sheet has no rows")

    admission_numbers = [r["admission_no"] for r in rows]
    students = Student.query.filter(
        Student.class_id == class_id,
        Student.admission_no.in_(admission_numbers)
    ).all()
    ids = {s.admission_no: s.student_id for s in students}

    student_marks = []
    unknown = []
    for row in rows:
        student_id = ids.get(row["admission_no"])
        if student_id is None:
            unknown.append({"admission_no": row["admission_no"], "error": "Student not found in class"})
            continue
        student_marks.append({
            "student_id": student_id,
            "marks_obtained": row["marks_obtained"],
            "comment": row["comment"],
        })

    outcome = enter_batch_marks(class_id, subject_id, exam_id, academic_year_id, student_marks, entered_by)
    if unknown:
        data = outcome.get("data") or {"results": [], "errors": []}
        data["errors"] = unknown + data["errors"]
        outcome["data"] = data
        outcome["success"] = False
    return outcome
