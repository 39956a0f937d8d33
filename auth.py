"""
User Authentication: Flask-Login blueprint.

Provides the JSON register, login, logout and current-user routes.
Uses werkzeug.security for password hashing.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from flask import Blueprint, current_app, jsonify
from flask_login import LoginManager, UserMixin, current_user, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

import audit
from db_stores import UserStoreDB
from extensions import limiter
from models import User as UserRecord
from schemas import LoginSchema, RegisterSchema
from storage import is_guest, leave_guest_mode

auth_bp = Blueprint("auth", __name__)
login_manager = LoginManager()

GUEST_USER = {"id": 0, "username": "guest", "isGuest": True}


class User(UserMixin):
    """Wraps a users row for Flask-Login."""

    def __init__(self, record: UserRecord):
        self.id = record.id
        self.username = record.username
        self.email = record.email
        self._record = record

    def to_dict(self) -> dict:
        return self._record.to_dict()

    @staticmethod
    def get(user_id: int) -> Optional[User]:
        record = UserStoreDB.get(user_id)
        return User(record) if record else None


@login_manager.user_loader
def load_user(user_id):
    return User.get(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Not authenticated"}), 401


def _lock_remaining(row) -> float:
    """Seconds left on an account lock (0 when not locked)."""
    locked_until = row["locked_until"] or ""
    if not locked_until:
        return 0
    try:
        lock_time = datetime.fromisoformat(locked_until)
    except ValueError:
        return 0
    return max(0.0, (lock_time - datetime.now()).total_seconds())


def _start_session(record: UserRecord) -> User:
    leave_guest_mode()
    user = User(record)
    login_user(user, remember=True)
    return user


@auth_bp.route("/api/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    from helpers import json_abort, parse_body

    body = parse_body(RegisterSchema, "registration")
    if UserStoreDB.get_by_username(body.username):
        json_abort(400, "Username already exists")

    record = UserStoreDB.create(body.username, generate_password_hash(body.password), body.email)
    audit.log_event(audit.REGISTER, record.id, username=record.username)
    user = _start_session(record)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/api/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    from helpers import json_abort, parse_body

    body = parse_body(LoginSchema, "login")
    row = UserStoreDB.get_by_username(body.username)
    if not row:
        json_abort(401, "Invalid username or password")

    remaining = _lock_remaining(row)
    if remaining > 0:
        mins = math.ceil(remaining / 60)
        audit.log_event(audit.LOGIN_LOCKED, row["id"], username=body.username)
        json_abort(401, f"Account temporarily locked. Try again in {mins} minute(s).", locked=True)

    if not check_password_hash(row["password_hash"], body.password):
        attempts = (row["login_attempts"] or 0) + 1
        locked_until = ""
        if attempts >= current_app.config.get("LOCKOUT_THRESHOLD", 5):
            minutes = current_app.config.get("LOCKOUT_MINUTES", 15)
            locked_until = (datetime.now() + timedelta(minutes=minutes)).isoformat()
        UserStoreDB.record_failed_login(row["id"], attempts, locked_until)
        audit.log_event(audit.LOGIN_FAILED, row["id"], username=body.username, attempts=attempts)
        json_abort(401, "Invalid username or password")

    UserStoreDB.reset_lockout(row["id"])
    user = _start_session(UserRecord.from_row(row))
    audit.log_event(audit.LOGIN_SUCCESS, user.id)
    return jsonify(user.to_dict())


@auth_bp.route("/api/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        audit.log_event(audit.LOGOUT, current_user.id)
        logout_user()
    leave_guest_mode()
    return jsonify({"message": "Logged out"})


@auth_bp.route("/api/user")
def me():
    if current_user.is_authenticated:
        return jsonify(current_user.to_dict())
    if is_guest():
        return jsonify(GUEST_USER)
    return login_manager.unauthorized()
