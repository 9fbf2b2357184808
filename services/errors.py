"""
Error taxonomy and the ``{success, data, message}`` outcome shape returned by
every public service operation.

Services raise ``ServiceError`` subclasses internally; ``service_outcome``
turns them into failure outcomes so nothing but a plain dict crosses the
service boundary. Route handlers map ``outcome["error"]`` to a status code.
"""

import logging
from functools import wraps

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    kind = "internal"

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ServiceError):
    kind = "validation"

    def __init__(self, message, fields=None, **details):
        if fields:
            details["fields"] = list(fields)
        super().__init__(message, **details)
        self.fields = list(fields or [])


class NotFoundError(ServiceError):
    kind = "not_found"


class AuthorizationError(ServiceError):
    kind = "authorization"


class ConflictError(ServiceError):
    kind = "conflict"


class InternalError(ServiceError):
    kind = "internal"


class EligibilityWarning:
    """Non-fatal eligibility problem attached to a successful write."""

    def __init__(self, student_id, subject_id, message):
        self.student_id = student_id
        self.subject_id = subject_id
        self.message = message

    def to_dict(self):
        return {
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "message": self.message,
        }

    def __str__(self):
        return self.message


def require_fields(values, names=None):
    """Raise ValidationError naming every field in ``values`` that is missing."""
    names = names or list(values)
    missing = [n for n in names if values.get(n) is None or values.get(n) == ""]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            fields=missing
        )


def ok(data=None, message=None, warnings=None):
    outcome = {"success": True, "data": data}
    if message:
        outcome["message"] = message
    if warnings:
        outcome["warnings"] = [w.to_dict() if isinstance(w, EligibilityWarning) else w for w in warnings]
    return outcome


def fail(error):
    outcome = {
        "success": False,
        "message": error.message,
        "error": error.kind,
    }
    outcome.update(error.details)
    return outcome


def _debug_enabled():
    return has_app_context() and current_app.debug


def service_outcome(operation):
    """Wrap a raising service function so it always returns an outcome dict."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError as exc:
                logger.warning("%s failed (%s): %s", operation, exc.kind, exc.message)
                return fail(exc)
            except Exception as exc:
                logger.exception("Unexpected error during %s args=%r kwargs=%r", operation, args, kwargs)
                message = f"Unexpected error during {operation}"
                if _debug_enabled():
                    message = f"{message}: {exc}"
                return fail(InternalError(message))
        wrapper.raw = func
        return wrapper

    return decorator
