"""Pomodoro study session routes: start, stop, history and per-subject totals."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from db_stores import StudySessionStoreDB
from helpers import check_owner, current_user_id, json_abort, parse_body
from schemas import StudySessionCreate, StudySessionUpdate

logger = logging.getLogger(__name__)

bp = Blueprint("study_sessions", __name__)


@bp.route("/api/study-sessions")
@login_required
def list_sessions():
    return jsonify([s.to_dict() for s in StudySessionStoreDB.list_for_user(current_user_id())])


@bp.route("/api/study-sessions/active")
@login_required
def active_session():
    session = StudySessionStoreDB.active_for_user(current_user_id())
    if session is None:
        json_abort(404, "No active study session found")
    return jsonify(session.to_dict())


@bp.route("/api/study-sessions/stats")
@login_required
def session_stats():
    return jsonify(StudySessionStoreDB.totals_by_subject(current_user_id()))


@bp.route("/api/study-sessions/<int:session_id>")
@login_required
def get_session(session_id):
    session = check_owner(StudySessionStoreDB.get(session_id), "Study session")
    return jsonify(session.to_dict())


@bp.route("/api/study-sessions", methods=["POST"])
@login_required
def start_session():
    body = parse_body(StudySessionCreate, "study session")
    fields = body.model_dump()
    if fields["focus_duration"] is None:
        fields["focus_duration"] = current_app.config.get("DEFAULT_FOCUS_SECONDS", 1500)
    if fields["break_duration"] is None:
        fields["break_duration"] = current_app.config.get("DEFAULT_BREAK_SECONDS", 300)

    uid = current_user_id()
    session = StudySessionStoreDB.create(uid, fields)
    logger.info("User %s started study session %s (%s)", uid, session.id, session.subject)
    return jsonify(session.to_dict()), 201


@bp.route("/api/study-sessions/<int:session_id>/stop", methods=["POST"])
@login_required
def stop_session(session_id):
    check_owner(StudySessionStoreDB.get(session_id), "Study session", "update")
    session = StudySessionStoreDB.stop(session_id)
    return jsonify(session.to_dict())


@bp.route("/api/study-sessions/<int:session_id>", methods=["PUT"])
@login_required
def update_session(session_id):
    check_owner(StudySessionStoreDB.get(session_id), "Study session", "update")
    body = parse_body(StudySessionUpdate, "study session")
    return jsonify(StudySessionStoreDB.update(session_id, body.changes()).to_dict())


@bp.route("/api/study-sessions/<int:session_id>", methods=["DELETE"])
@login_required
def delete_session(session_id):
    check_owner(StudySessionStoreDB.get(session_id), "Study session", "delete")
    StudySessionStoreDB.delete(session_id)
    return "", 204
