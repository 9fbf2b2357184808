from flask import Blueprint, request
from flask_login import current_user

from models.role import ACADEMIC, ADMIN, TEACHER
from services import marks_service
from services.authorization import check_teacher_authorization, get_teacher_subjects
from services.eligibility import batch_check_eligibility, check_eligibility
from utils.decorators import current_teacher_id, role_required
from utils.responses import respond

marks_bp = Blueprint("marks", __name__, url_prefix="/marks")

STAFF_ROLES = (ADMIN, ACADEMIC, TEACHER)


def _authorize(subject_id, class_id):
    """Failure response when the current teacher may not touch these marks."""
    teacher_id = current_teacher_id()
    if teacher_id is None:
        return None
    outcome = check_teacher_authorization(teacher_id, subject_id, class_id)
    if not outcome["success"]:
        return respond(outcome)
    if not outcome["data"]["is_authorized"]:
        return respond({
            "success": False,
            "error": "authorization",
            "message": "You are not authorized to enter marks for this subject in this class"
        })
    return None


def _json():
    return request.get_json(silent=True) or {}


# =========================================================
# SINGLE ENTRY
# =========================================================
@marks_bp.route("/enter", methods=["POST"])
@role_required(*STAFF_ROLES)
def enter_mark():
    data = _json()
    denied = _authorize(data.get("subject_id"), data.get("class_id"))
    if denied:
        return denied

    outcome = marks_service.enter_mark(
        student_id=data.get("student_id"),
        exam_id=data.get("exam_id"),
        subject_id=data.get("subject_id"),
        class_id=data.get("class_id"),
        academic_year_id=data.get("academic_year_id"),
        marks_obtained=data.get("marks_obtained"),
        entered_by=current_user.user_id,
        comment=data.get("comment"),
        is_principal=data.get("is_principal"),
        is_subsidiary=data.get("is_subsidiary"),
        grade=data.get("grade"),
        points=data.get("points")
    )
    return respond(outcome)


# =========================================================
# BATCH ENTRY
# =========================================================
@marks_bp.route("/batch", methods=["POST"])
@role_required(*STAFF_ROLES)
def enter_batch():
    data = _json()
    denied = _authorize(data.get("subject_id"), data.get("class_id"))
    if denied:
        return denied

    outcome = marks_service.enter_batch_marks(
        class_id=data.get("class_id"),
        subject_id=data.get("subject_id"),
        exam_id=data.get("exam_id"),
        academic_year_id=data.get("academic_year_id"),
        student_marks=data.get("student_marks"),
        entered_by=current_user.user_id
    )
    return respond(outcome)


@marks_bp.route("/upload", methods=["POST"])
@role_required(*STAFF_ROLES)
def upload_marks():
    file = request.files.get("file")
    if file is None or not file.filename:
        return respond({"success": False, "error": "validation", "message": "No file uploaded"})

    class_id = request.form.get("class_id", type=int)
    subject_id = request.form.get("subject_id", type=int)
    denied = _authorize(subject_id, class_id)
    if denied:
        return denied

    outcome = marks_service.import_marks_from_excel(
        file,
        class_id=class_id,
        subject_id=subject_id,
        exam_id=request.form.get("exam_id", type=int),
        academic_year_id=request.form.get("academic_year_id", type=int),
        entered_by=current_user.user_id
    )
    return respond(outcome)


# =========================================================
# LOOKUPS
# =========================================================
@marks_bp.route("/check", methods=["GET"])
@role_required(*STAFF_ROLES)
def check_existing():
    outcome = marks_service.check_existing_marks(
        class_id=request.args.get("class_id", type=int),
        subject_id=request.args.get("subject_id", type=int),
        exam_id=request.args.get("exam_id", type=int),
        teacher_id=current_teacher_id()
    )
    return respond(outcome)


@marks_bp.route("/student", methods=["GET"])
@role_required(*STAFF_ROLES)
def check_student():
    outcome = marks_service.check_student_marks(
        student_id=request.args.get("student_id", type=int),
        subject_id=request.args.get("subject_id", type=int),
        exam_id=request.args.get("exam_id", type=int),
        teacher_id=current_teacher_id()
    )
    return respond(outcome)


@marks_bp.route("/eligibility", methods=["GET"])
@role_required(*STAFF_ROLES)
def eligibility():
    outcome = check_eligibility(
        request.args.get("student_id", type=int),
        request.args.get("subject_id", type=int)
    )
    return respond(outcome)


@marks_bp.route("/eligibility/batch", methods=["POST"])
@role_required(*STAFF_ROLES)
def eligibility_batch():
    data = _json()
    outcome = batch_check_eligibility(data.get("student_ids"), data.get("subject_id"))
    return respond(outcome)


@marks_bp.route("/teacher-subjects", methods=["GET"])
@role_required(*STAFF_ROLES)
def teacher_subjects():
    teacher_id = current_teacher_id()
    if teacher_id is None:
        teacher_id = request.args.get("teacher_id", default=current_user.user_id, type=int)
    outcome = get_teacher_subjects(teacher_id, request.args.get("class_id", type=int))
    return respond(outcome)


# =========================================================
# DELETE
# =========================================================
@marks_bp.route("/", methods=["DELETE"])
@role_required(ADMIN, ACADEMIC)
def delete_mark():
    outcome = marks_service.delete_mark(
        student_id=request.args.get("student_id", type=int),
        subject_id=request.args.get("subject_id", type=int),
        exam_id=request.args.get("exam_id", type=int)
    )
    return respond(outcome)
