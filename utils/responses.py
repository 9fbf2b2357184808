from flask import jsonify

STATUS_BY_ERROR = {
    "validation": 400,
    "authentication": 401,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "internal": 500,
}

# Batch outcomes that saved some entries and rejected others carry no error kind
PARTIAL_STATUS = 207


def outcome_status(outcome, success_status=200):
    if outcome.get("success"):
        return success_status
    if "error" not in outcome:
        return PARTIAL_STATUS
    return STATUS_BY_ERROR.get(outcome["error"], 400)


def respond(outcome, success_status=200):
    """JSON response for a service outcome with the status its error kind maps to."""
    return jsonify(outcome), outcome_status(outcome, success_status)
