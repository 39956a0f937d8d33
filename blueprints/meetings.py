"""Meeting notes routes."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import MeetingStoreDB
from helpers import check_owner, current_user_id, parse_body
from schemas import MeetingCreate, MeetingUpdate

bp = Blueprint("meetings", __name__)


@bp.route("/api/meetings")
@login_required
def list_meetings():
    return jsonify([m.to_dict() for m in MeetingStoreDB.list_for_user(current_user_id())])


@bp.route("/api/meetings/<int:meeting_id>")
@login_required
def get_meeting(meeting_id):
    meeting = check_owner(MeetingStoreDB.get(meeting_id), "Meeting")
    return jsonify(meeting.to_dict())


@bp.route("/api/meetings", methods=["POST"])
@login_required
def create_meeting():
    body = parse_body(MeetingCreate, "meeting")
    meeting = MeetingStoreDB.create(current_user_id(), body.model_dump())
    return jsonify(meeting.to_dict()), 201


@bp.route("/api/meetings/<int:meeting_id>", methods=["PUT"])
@login_required
def update_meeting(meeting_id):
    check_owner(MeetingStoreDB.get(meeting_id), "Meeting", "update")
    body = parse_body(MeetingUpdate, "meeting")
    return jsonify(MeetingStoreDB.update(meeting_id, body.changes()).to_dict())


@bp.route("/api/meetings/<int:meeting_id>", methods=["DELETE"])
@login_required
def delete_meeting(meeting_id):
    check_owner(MeetingStoreDB.get(meeting_id), "Meeting", "delete")
    MeetingStoreDB.delete(meeting_id)
    return "", 204
