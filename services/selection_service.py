import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import AcademicYear, SelectionItem, Student, StudentSubjectSelection, Subject
from models.enums import EducationLevel, SubjectLevel, SubjectType
from services.errors import ConflictError, ValidationError, ok, require_fields, service_outcome
from utils.db import get_or_404, unit_of_work, utcnow

logger = logging.getLogger(__name__)


def core_subjects():
    """All active core subjects offered at O-Level."""
    return Subject.query.filter(
        Subject.subject_type == SubjectType.CORE.value,
        Subject.is_active.is_(True),
        or_(
            Subject.education_level == SubjectLevel.O_LEVEL.value,
            Subject.education_level == SubjectLevel.BOTH.value
        )
    ).order_by(Subject.subject_name.asc()).all()


def _optional_subjects(subject_ids):
    subject_ids = list(dict.fromkeys(subject_ids or []))
    if not subject_ids:
        return []

    subjects = Subject.query.filter(Subject.subject_id.in_(subject_ids)).all()
    found = {s.subject_id: s for s in subjects}

    unknown = [sid for sid in subject_ids if sid not in found]
    if unknown:
        raise ValidationError(f"Unknown subjects: {', '.join(map(str, unknown))}")

    not_optional = [s.subject_code for s in subjects if s.subject_type != SubjectType.OPTIONAL.value]
    if not_optional:
        raise ValidationError(f"Not optional subjects: {', '.join(not_optional)}")

    wrong_level = [s.subject_code for s in subjects if s.education_level == SubjectLevel.A_LEVEL.value]
    if wrong_level:
        raise ValidationError(f"Not offered at O-Level: {', '.join(wrong_level)}")

    return [found[sid] for sid in subject_ids]


def _build_items(optional):
    items = [
        SelectionItem(subject_id=s.subject_id, selection_type=SubjectType.CORE.value)
        for s in core_subjects()
    ]
    core_ids = {i.subject_id for i in items}
    items.extend(
        SelectionItem(subject_id=s.subject_id, selection_type=SubjectType.OPTIONAL.value)
        for s in optional
        if s.subject_id not in core_ids
    )
    return items


def _existing_selection(student_id, academic_year_id):
    return StudentSubjectSelection.query.filter_by(
        student_id=student_id,
        academic_year_id=academic_year_id
    ).first()


def _conflict(existing):
    return ConflictError(
        "Student already has a subject selection for this academic year",
        existing=existing.to_dict()
    )


@service_outcome("subject selection")
def create_subject_selection(student_id, academic_year_id, optional_subject_ids, approved_by, notes=None):
    require_fields({"student_id": student_id, "academic_year_id": academic_year_id})
    student = get_or_404(Student, student_id, "Student")
    get_or_404(AcademicYear, academic_year_id, "Academic year")

    if EducationLevel.parse(student.education_level) is not EducationLevel.O_LEVEL:
        raise ValidationError("Subject selections are only recorded for O-Level students")

    existing = _existing_selection(student_id, academic_year_id)
    if existing is not None:
        raise _conflict(existing)

    optional = _optional_subjects(optional_subject_ids)
    selection = StudentSubjectSelection(
        student_id=student_id,
        academic_year_id=academic_year_id,
        approved_by=approved_by,
        notes=notes
    )
    selection.items = _build_items(optional)

    try:
        with unit_of_work() as session:
            session.add(selection)
    except IntegrityError:
        # A concurrent request stored its selection between the check and the insert
        existing = _existing_selection(student_id, academic_year_id)
        if existing is None:
            raise
        raise _conflict(existing)

    logger.info(
        "Created subject selection %s for student %s (%s optional subjects)",
        selection.selection_id, student_id, len(optional)
    )
    return ok(selection.to_dict(), message="Subject selection created")


@service_outcome("subject selection update")
def update_subject_selection(selection_id, optional_subject_ids=None, approved_by=None, notes=None):
    require_fields({"selection_id": selection_id})
    selection = get_or_404(StudentSubjectSelection, selection_id, "Subject selection")

    with unit_of_work() as session:
        if optional_subject_ids is not None:
            optional = _optional_subjects(optional_subject_ids)
            selection.items.clear()
            # Drop the old rows before reinserting the same (selection, subject) pairs
            session.flush()
            selection.items.extend(_build_items(optional))
        if approved_by is not None:
            selection.approved_by = approved_by
        if notes is not None:
            selection.notes = notes
        selection.updated_at = utcnow()

    logger.info("Updated subject selection %s", selection_id)
    return ok(selection.to_dict(), message="Subject selection updated")
