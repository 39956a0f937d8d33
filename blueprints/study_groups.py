"""Study groups: CRUD, membership, leaderboard and who-is-studying-now."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required

import group_stats
from db_stores import StudyGroupStoreDB
from helpers import current_user_id, json_abort, parse_body
from schemas import StudyGroupCreate, StudyGroupUpdate

logger = logging.getLogger(__name__)

bp = Blueprint("study_groups", __name__)


def _group_or_404(group_id: int):
    group = StudyGroupStoreDB.get(group_id)
    if group is None:
        json_abort(404, "Study group not found")
    return group


def _created_group(group_id: int, action: str):
    """Only the creator may change or delete a group."""
    group = _group_or_404(group_id)
    if group.created_by != current_user_id():
        json_abort(403, f"Not authorized to {action} this study group")
    return group


@bp.route("/api/study-groups")
@login_required
def list_groups():
    uid = current_user_id()
    seen: set[int] = set()
    groups = []
    for group in StudyGroupStoreDB.created_by(uid) + StudyGroupStoreDB.for_member(uid):
        if group.id not in seen:
            seen.add(group.id)
            groups.append(group.to_dict())
    return jsonify(groups)


@bp.route("/api/study-groups/search")
@login_required
def search_groups():
    term = request.args.get("q", "").strip()
    if not term:
        json_abort(400, "Search query is required")
    return jsonify([g.to_dict() for g in StudyGroupStoreDB.search(term)])


@bp.route("/api/study-groups/<int:group_id>")
@login_required
def get_group(group_id):
    return jsonify(_group_or_404(group_id).to_dict())


@bp.route("/api/study-groups", methods=["POST"])
@login_required
def create_group():
    body = parse_body(StudyGroupCreate, "study group")
    uid = current_user_id()
    group = StudyGroupStoreDB.create(uid, body.model_dump())
    logger.info("User %s created study group %s", uid, group.id)
    return jsonify(group.to_dict()), 201


@bp.route("/api/study-groups/<int:group_id>", methods=["PUT"])
@login_required
def update_group(group_id):
    _created_group(group_id, "update")
    body = parse_body(StudyGroupUpdate, "study group")
    return jsonify(StudyGroupStoreDB.update(group_id, body.changes()).to_dict())


@bp.route("/api/study-groups/<int:group_id>", methods=["DELETE"])
@login_required
def delete_group(group_id):
    _created_group(group_id, "delete")
    StudyGroupStoreDB.delete(group_id)
    logger.info("User %s deleted study group %s", current_user_id(), group_id)
    return "", 204


# ── Membership ────────────────────────────────────────────

@bp.route("/api/study-groups/<int:group_id>/members")
@login_required
def group_members(group_id):
    _group_or_404(group_id)
    return jsonify([m.to_dict() for m in StudyGroupStoreDB.members(group_id)])


@bp.route("/api/study-groups/<int:group_id>/join", methods=["POST"])
@login_required
def join_group(group_id):
    _group_or_404(group_id)
    member = StudyGroupStoreDB.join(group_id, current_user_id())
    if member is None:
        json_abort(409, "Already a member of this study group")
    return jsonify(member.to_dict()), 201


@bp.route("/api/study-groups/<int:group_id>/leave", methods=["POST"])
@login_required
def leave_group(group_id):
    group = _group_or_404(group_id)
    uid = current_user_id()
    if group.created_by == uid:
        json_abort(400, "The creator cannot leave the group; delete it instead")
    if not StudyGroupStoreDB.leave(group_id, uid):
        json_abort(404, "Not a member of this study group")
    return "", 204


# ── Aggregates ────────────────────────────────────────────

@bp.route("/api/study-groups/<int:group_id>/leaderboard")
@login_required
def leaderboard(group_id):
    return jsonify(group_stats.leaderboard(group_id))


@bp.route("/api/study-groups/<int:group_id>/active-sessions")
@login_required
def active_sessions(group_id):
    return jsonify(group_stats.active_sessions(group_id))
