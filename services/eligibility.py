"""
Decides whether a student may receive marks for a subject.

O-Level core subjects are open to every O-Level student, optional subjects
need a selection record, and A-Level subjects must be part of the student's
subject combination. A failed check is either blocking (wrong or unknown
education level) or a warning: marks may still be written, but the caller
has to show the warning.
"""

import logging
from dataclasses import asdict, dataclass

from models import Student, StudentSubjectSelection, Subject
from models.enums import EducationLevel, SubjectLevel
from services.errors import ok, require_fields, service_outcome
from utils.db import get_or_404

logger = logging.getLogger(__name__)

LEVEL_MISMATCH = "education level mismatch"
NO_COMBINATION = "no subject combination"
NOT_IN_COMBINATION = "subject not in subject combination"
NOT_SELECTED = "optional subject not selected"
UNSUPPORTED_LEVEL = "unsupported education level"
STUDENT_NOT_FOUND = "student not found"


@dataclass
class Eligibility:
    is_eligible: bool
    is_principal: bool = False
    is_subsidiary: bool = False
    reason: str = ""
    # Ineligible, but the entry may go ahead with a warning
    is_warning: bool = False

    @property
    def is_blocking(self):
        return not self.is_eligible and not self.is_warning

    def to_dict(self):
        return asdict(self)


def current_selection(student):
    """Selection for the academic year of the student's class, else the latest one."""
    query = StudentSubjectSelection.query.filter_by(student_id=student.student_id)
    class_row = student.class_
    if class_row is not None and class_row.academic_year_id is not None:
        selection = query.filter_by(academic_year_id=class_row.academic_year_id).first()
        if selection is not None:
            return selection
    return query.order_by(
        StudentSubjectSelection.academic_year_id.desc(),
        StudentSubjectSelection.selection_id.desc()
    ).first()


class CoreSubjectRule:
    def evaluate(self, student, subject):
        return Eligibility(True, reason="core subject")


class OptionalSelectionRule:
    def __init__(self, selection_lookup=current_selection):
        self.selection_lookup = selection_lookup

    def evaluate(self, student, subject):
        selection = self.selection_lookup(student)
        if selection is not None and subject.subject_id in selection.optional_subject_ids:
            return Eligibility(True, reason="optional subject selected")
        return Eligibility(False, reason=NOT_SELECTED, is_warning=True)


class CombinationRule:
    def evaluate(self, student, subject):
        combination = student.subject_combination
        if student.subject_combination_id is None or combination is None:
            return Eligibility(False, reason=NO_COMBINATION, is_warning=True)

        item = combination.item_for(subject.subject_id)
        if item is None:
            return Eligibility(False, reason=NOT_IN_COMBINATION, is_warning=True)

        return Eligibility(
            True,
            is_principal=bool(item.is_principal),
            is_subsidiary=bool(item.is_subsidiary),
            reason="subject in combination"
        )


CORE_RULE = CoreSubjectRule()
OPTIONAL_RULE = OptionalSelectionRule()
COMBINATION_RULE = CombinationRule()


def _level_mismatch(student, subject):
    subject_level = subject.education_level or SubjectLevel.BOTH.value
    if subject_level == SubjectLevel.BOTH.value:
        return False
    return subject_level != student.education_level


def rule_for(level, subject):
    if level is EducationLevel.O_LEVEL:
        return CORE_RULE if subject.is_core else OPTIONAL_RULE
    if level is EducationLevel.A_LEVEL:
        return COMBINATION_RULE
    return None


def is_eligible(student, subject):
    if _level_mismatch(student, subject):
        return Eligibility(False, reason=LEVEL_MISMATCH)

    level = EducationLevel.parse(student.education_level)
    rule = rule_for(level, subject)
    if rule is None:
        logger.error(
            "Student %s has unsupported education level %r",
            student.student_id, student.education_level
        )
        return Eligibility(False, reason=UNSUPPORTED_LEVEL)

    return rule.evaluate(student, subject)


@service_outcome("eligibility check")
def check_eligibility(student_id, subject_id):
    require_fields({"student_id": student_id, "subject_id": subject_id})
    student = get_or_404(Student, student_id, "Student")
    subject = get_or_404(Subject, subject_id, "Subject")

    result = is_eligible(student, subject)
    logger.info(
        "Eligibility student=%s subject=%s eligible=%s reason=%s",
        student_id, subject_id, result.is_eligible, result.reason
    )
    return ok(result.to_dict())


@service_outcome("batch eligibility check")
def batch_check_eligibility(student_ids, subject_id):
    require_fields({"student_ids": student_ids, "subject_id": subject_id})
    subject = get_or_404(Subject, subject_id, "Subject")

    students = Student.query.filter(Student.student_id.in_(student_ids)).all()
    by_id = {s.student_id: s for s in students}

    results = {}
    for student_id in student_ids:
        student = by_id.get(student_id)
        if student is None:
            results[student_id] = Eligibility(False, reason=STUDENT_NOT_FOUND).to_dict()
            continue
        results[student_id] = is_eligible(student, subject).to_dict()

    eligible = sum(1 for r in results.values() if r["is_eligible"])
    logger.info(
        "Batch eligibility for subject %s: %s of %s students eligible",
        subject_id, eligible, len(results)
    )
    return ok(results)
