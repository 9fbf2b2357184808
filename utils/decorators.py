from functools import wraps

from flask import jsonify
from flask_login import current_user

from models.role import TEACHER


def role_required(*roles):
    """Allow the view only for logged-in users holding one of ``roles``."""
    allowed = {r.upper() for r in roles}

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({
                    "success": False,
                    "error": "authentication",
                    "message": "Login required"
                }), 401

            role_name = (current_user.role_name or "").upper()
            if role_name not in allowed:
                return jsonify({
                    "success": False,
                    "error": "authorization",
                    "message": "You do not have the required role"
                }), 403

            return func(*args, **kwargs)
        return wrapper
    return decorator


def current_teacher_id():
    """User id of the logged-in teacher; None for admin and academic staff."""
    if (current_user.role_name or "").upper() == TEACHER:
        return current_user.user_id
    return None
