"""Task schedule routes. Available to signed-in users and guests."""

from __future__ import annotations

import re

from flask import Blueprint, jsonify

from helpers import check_owner, json_abort, login_or_guest, parse_body
from schemas import DATE_PATTERN, TaskCreate, TaskUpdate
from storage import get_storage

bp = Blueprint("tasks", __name__)


def _owned_task(task_id: int, action: str = "access"):
    store = get_storage()
    return store, check_owner(store.get_task(task_id), "Task", action, owner_id=store.owner_id)


@bp.route("/api/tasks")
@login_or_guest
def list_tasks():
    return jsonify([t.to_dict() for t in get_storage().list_tasks()])


@bp.route("/api/tasks/date/<day>")
@login_or_guest
def tasks_by_date(day):
    if not re.match(DATE_PATTERN, day):
        json_abort(400, "Date must be YYYY-MM-DD")
    return jsonify([t.to_dict() for t in get_storage().tasks_on(day)])


@bp.route("/api/tasks/<int:task_id>")
@login_or_guest
def get_task(task_id):
    _, task = _owned_task(task_id)
    return jsonify(task.to_dict())


@bp.route("/api/tasks", methods=["POST"])
@login_or_guest
def create_task():
    body = parse_body(TaskCreate, "task")
    task = get_storage().create_task(body.model_dump())
    return jsonify(task.to_dict()), 201


@bp.route("/api/tasks/<int:task_id>", methods=["PUT"])
@login_or_guest
def update_task(task_id):
    store, _ = _owned_task(task_id, "update")
    body = parse_body(TaskUpdate, "task")
    task = store.update_task(task_id, body.changes())
    return jsonify(task.to_dict())


@bp.route("/api/tasks/<int:task_id>", methods=["DELETE"])
@login_or_guest
def delete_task(task_id):
    store, _ = _owned_task(task_id, "delete")
    store.delete_task(task_id)
    return "", 204
