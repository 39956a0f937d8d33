"""Habit routes, including the daily "done today" tracker.

Available to signed-in users and guests.
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from habit_tracking import weekly_progress
from helpers import check_owner, login_or_guest, parse_body
from schemas import HabitCreate, HabitUpdate
from storage import get_storage

bp = Blueprint("habits", __name__)


def _owned_habit(habit_id: int, action: str = "access"):
    store = get_storage()
    return store, check_owner(store.get_habit(habit_id), "Habit", action, owner_id=store.owner_id)


@bp.route("/api/habits")
@login_or_guest
def list_habits():
    return jsonify([h.to_dict() for h in get_storage().list_habits()])


@bp.route("/api/habits/<int:habit_id>")
@login_or_guest
def get_habit(habit_id):
    _, habit = _owned_habit(habit_id)
    return jsonify(habit.to_dict())


@bp.route("/api/habits", methods=["POST"])
@login_or_guest
def create_habit():
    body = parse_body(HabitCreate, "habit")
    habit = get_storage().create_habit(body.model_dump())
    return jsonify(habit.to_dict()), 201


@bp.route("/api/habits/<int:habit_id>", methods=["PUT"])
@login_or_guest
def update_habit(habit_id):
    store, _ = _owned_habit(habit_id, "update")
    body = parse_body(HabitUpdate, "habit")
    habit = store.update_habit(habit_id, body.changes())
    return jsonify(habit.to_dict())


@bp.route("/api/habits/<int:habit_id>", methods=["DELETE"])
@login_or_guest
def delete_habit(habit_id):
    store, _ = _owned_habit(habit_id, "delete")
    store.delete_habit(habit_id)
    return "", 204


@bp.route("/api/habits/<int:habit_id>/track", methods=["POST"])
@login_or_guest
def track_habit(habit_id):
    store, _ = _owned_habit(habit_id, "update")
    habit = store.track_habit(habit_id)
    return jsonify({**habit.to_dict(), "weeklyProgress": weekly_progress(habit)})
