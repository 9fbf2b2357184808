from flask import Blueprint, jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user

from services.auth_service import authenticate_user

auth_bp = Blueprint("auth", __name__)


# =========================================================
# LOGIN ROUTE
# =========================================================
@auth_bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or request.form
    username = payload.get("username")
    password = payload.get("password")

    if not username or not password:
        return jsonify({
            "success": False,
            "error": "validation",
            "message": "Username and password are required"
        }), 400

    user = authenticate_user(username, password)
    if not user:
        return jsonify({
            "success": False,
            "error": "authentication",
            "message": "Invalid username or password"
        }), 401

    login_user(user)
    session["user_id"] = user.user_id
    session["role_id"] = user.role_id

    return jsonify({
        "success": True,
        "data": {
            "user_id": user.user_id,
            "username": user.username,
            "full_name": user.full_name,
            "role": user.role_name,
        }
    })


# =========================================================
# LOGOUT ROUTE
# =========================================================
@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    username = current_user.username
    logout_user()
    session.clear()
    return jsonify({"success": True, "message": f"Logged out {username}"})
