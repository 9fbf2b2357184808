from flask import Blueprint, request, send_file

from models.role import ACADEMIC, ADMIN, TEACHER
from services.report_service import (
    EXCEL_MIMETYPE, build_class_workbook, generate_class_report,
    generate_student_report, workbook_filename
)
from services.results_service import get_class_results, get_student_results
from utils.decorators import current_teacher_id, role_required
from utils.responses import respond

results_bp = Blueprint("results", __name__, url_prefix="/results")

STAFF_ROLES = (ADMIN, ACADEMIC, TEACHER)


# =========================================================
# AGGREGATED RESULTS
# =========================================================
@results_bp.route("/student/<int:student_id>/<int:exam_id>", methods=["GET"])
@role_required(*STAFF_ROLES)
def student_results(student_id, exam_id):
    return respond(get_student_results(student_id, exam_id, teacher_id=current_teacher_id()))


@results_bp.route("/class/<int:class_id>/<int:exam_id>", methods=["GET"])
@role_required(*STAFF_ROLES)
def class_results(class_id, exam_id):
    return respond(get_class_results(class_id, exam_id, teacher_id=current_teacher_id()))


# =========================================================
# REPORTS
# =========================================================
@results_bp.route("/report/student/<int:student_id>/<int:exam_id>", methods=["GET"])
@role_required(*STAFF_ROLES)
def student_report(student_id, exam_id):
    return respond(generate_student_report(student_id, exam_id, teacher_id=current_teacher_id()))


@results_bp.route("/report/class/<int:class_id>/<int:exam_id>", methods=["GET"])
@role_required(*STAFF_ROLES)
def class_report(class_id, exam_id):
    return respond(generate_class_report(class_id, exam_id, teacher_id=current_teacher_id()))


@results_bp.route("/report/class/<int:class_id>/<int:exam_id>/excel", methods=["GET"])
@role_required(ADMIN, ACADEMIC)
def class_report_excel(class_id, exam_id):
    outcome = generate_class_report(class_id, exam_id)
    if not outcome["success"]:
        return respond(outcome)

    report = outcome["data"]
    output = build_class_workbook(report)
    download_name = request.args.get("filename") or workbook_filename(report)

    return send_file(
        output,
        mimetype=EXCEL_MIMETYPE,
        as_attachment=True,
        download_name=download_name
    )
