"""Guest / try-before-signup routes.

Guests get tasks and habits kept in their own session; everything else
under /api answers 403 until they sign up.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, session as flask_session
from flask_login import current_user

import audit
from auth import GUEST_USER
from storage import leave_guest_mode

bp = Blueprint("guest", __name__)

GUEST_ALLOWED_PREFIXES = (
    "/api/tasks",
    "/api/habits",
    "/api/guest",
    "/api/user",
    "/api/login",
    "/api/register",
    "/api/logout",
)


@bp.route("/api/guest", methods=["POST"])
def start_guest():
    if current_user.is_authenticated:
        return jsonify({"message": "Already signed in"}), 400
    if not current_app.config.get("GUEST_MODE_ENABLED", True):
        return jsonify({"message": "Guest mode is disabled"}), 403
    flask_session["guest"] = True
    audit.log_event(audit.GUEST_START)
    return jsonify(GUEST_USER), 201


@bp.route("/api/guest", methods=["DELETE"])
def end_guest():
    if flask_session.get("guest"):
        audit.log_event(audit.GUEST_END)
    leave_guest_mode()
    return "", 204


@bp.before_app_request
def _guest_middleware():
    """Block every /api route except tasks, habits and auth for guests."""
    if not flask_session.get("guest") or current_user.is_authenticated:
        return None
    path = request.path
    if not path.startswith("/api/"):
        return None
    if any(path == p or path.startswith(p + "/") for p in GUEST_ALLOWED_PREFIXES):
        return None
    return jsonify({"message": "Sign up for full access", "guestLimit": True}), 403
