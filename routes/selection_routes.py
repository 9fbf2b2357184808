from flask import Blueprint, request
from flask_login import current_user

from models.role import ACADEMIC, ADMIN
from services.selection_service import create_subject_selection, update_subject_selection
from utils.decorators import role_required
from utils.responses import respond

selection_bp = Blueprint("selections", __name__, url_prefix="/subject-selections")


@selection_bp.route("/", methods=["POST"])
@role_required(ADMIN, ACADEMIC)
def create_selection():
    data = request.get_json(silent=True) or {}
    outcome = create_subject_selection(
        student_id=data.get("student_id"),
        academic_year_id=data.get("academic_year_id"),
        optional_subject_ids=data.get("optional_subjects", []),
        approved_by=current_user.user_id,
        notes=data.get("notes")
    )
    return respond(outcome, success_status=201)


@selection_bp.route("/<int:selection_id>", methods=["PUT"])
@role_required(ADMIN, ACADEMIC)
def update_selection(selection_id):
    data = request.get_json(silent=True) or {}
    outcome = update_subject_selection(
        selection_id,
        optional_subject_ids=data.get("optional_subjects"),
        approved_by=current_user.user_id,
        notes=data.get("notes")
    )
    return respond(outcome)
