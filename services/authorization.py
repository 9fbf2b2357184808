import logging

from flask import current_app, has_app_context

from extensions import db
from models import Class, Subject, TeacherSubjectAssignment
from models.enums import AssignmentStatus
from services.errors import (
    AuthorizationError, NotFoundError, ok, require_fields, service_outcome
)
from utils.cache import NullCache

logger = logging.getLogger(__name__)

CACHE_KEY = "teacher_subject_cache"


def teacher_cache():
    if has_app_context():
        return current_app.extensions.get(CACHE_KEY, NullCache())
    return NullCache()


def is_teacher_authorized(teacher_id, subject_id, class_id):
    """Class teacher of the class, or an active assignment for the subject there.

    Always answered from the database; the subject cache is never consulted.
    """
    class_row = db.session.get(Class, class_id)
    if class_row is None:
        return False

    if class_row.class_teacher_id is not None and class_row.class_teacher_id == teacher_id:
        logger.debug("Teacher %s is class teacher of class %s", teacher_id, class_id)
        return True

    assignment = TeacherSubjectAssignment.query.filter_by(
        teacher_id=teacher_id,
        subject_id=subject_id,
        class_id=class_id,
        status=AssignmentStatus.ACTIVE.value
    ).first()
    return assignment is not None


def require_teacher_authorization(teacher_id, subject_id, class_id):
    if not is_teacher_authorized(teacher_id, subject_id, class_id):
        logger.warning(
            "Teacher %s is not authorized for subject %s in class %s",
            teacher_id, subject_id, class_id
        )
        raise AuthorizationError(
            "You are not authorized to access marks for this subject in this class"
        )


def is_class_teacher(teacher_id, class_id):
    class_row = db.session.get(Class, class_id)
    return class_row is not None and class_row.class_teacher_id == teacher_id


def require_class_teacher(teacher_id, class_id):
    """Whole-class and whole-student results are for the class teacher only."""
    if not is_class_teacher(teacher_id, class_id):
        logger.warning("Teacher %s is not class teacher of class %s", teacher_id, class_id)
        raise AuthorizationError("Only the class teacher may view results for this class")


@service_outcome("teacher authorization check")
def check_teacher_authorization(teacher_id, subject_id, class_id):
    require_fields({"teacher_id": teacher_id, "subject_id": subject_id, "class_id": class_id})
    return ok({"is_authorized": is_teacher_authorized(teacher_id, subject_id, class_id)})


def _subject_dict(subject):
    return {
        "subject_id": subject.subject_id,
        "code": subject.subject_code,
        "name": subject.subject_name,
        "type": subject.subject_type,
        "education_level": subject.education_level,
    }


@service_outcome("teacher subject listing")
def get_teacher_subjects(teacher_id, class_id, cache=None):
    require_fields({"teacher_id": teacher_id, "class_id": class_id})
    cache = cache or teacher_cache()
    key = (teacher_id, class_id)
    cached = cache.get(key)
    if cached is not None:
        return ok(cached)

    class_row = db.session.get(Class, class_id)
    if class_row is None:
        raise NotFoundError(f"Class with ID {class_id} not found")

    if class_row.class_teacher_id == teacher_id:
        subjects = class_row.subjects
    else:
        assignments = TeacherSubjectAssignment.query.filter_by(
            teacher_id=teacher_id,
            class_id=class_id,
            status=AssignmentStatus.ACTIVE.value
        ).all()
        subjects = [a.subject for a in assignments]

    data = sorted((_subject_dict(s) for s in subjects), key=lambda s: s["name"])
    cache.set(key, data)
    return ok(data)


def _invalidate(cache, teacher_id, class_id):
    cache = cache or teacher_cache()
    cache.invalidate((teacher_id, class_id))


@service_outcome("teacher assignment")
def assign_teacher(teacher_id, subject_id, class_id, cache=None):
    require_fields({"teacher_id": teacher_id, "subject_id": subject_id, "class_id": class_id})
    if db.session.get(Class, class_id) is None:
        raise NotFoundError(f"Class with ID {class_id} not found")
    if db.session.get(Subject, subject_id) is None:
        raise NotFoundError(f"Subject with ID {subject_id} not found")

    try:
        assignment = TeacherSubjectAssignment.query.filter_by(
            teacher_id=teacher_id,
            subject_id=subject_id,
            class_id=class_id
        ).first()
        if assignment is None:
            assignment = TeacherSubjectAssignment(
                teacher_id=teacher_id,
                subject_id=subject_id,
                class_id=class_id
            )
            db.session.add(assignment)
        assignment.status = AssignmentStatus.ACTIVE.value
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    _invalidate(cache, teacher_id, class_id)
    logger.info("Assigned teacher %s to subject %s in class %s", teacher_id, subject_id, class_id)
    return ok({"assignment_id": assignment.assignment_id, "status": assignment.status})


@service_outcome("teacher assignment removal")
def deactivate_assignment(teacher_id, subject_id, class_id, cache=None):
    require_fields({"teacher_id": teacher_id, "subject_id": subject_id, "class_id": class_id})
    assignment = TeacherSubjectAssignment.query.filter_by(
        teacher_id=teacher_id,
        subject_id=subject_id,
        class_id=class_id
    ).first()
    if assignment is None:
        raise NotFoundError("Teacher assignment not found")

    try:
        assignment.status = AssignmentStatus.INACTIVE.value
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    _invalidate(cache, teacher_id, class_id)
    logger.info("Deactivated teacher %s for subject %s in class %s", teacher_id, subject_id, class_id)
    return ok({"assignment_id": assignment.assignment_id, "status": assignment.status})
