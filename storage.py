"""Task and habit storage with a database / guest-session swap.

Signed-in users read and write the relational store. Guests (see
blueprints/guest.py) keep their tasks and habits as serialised lists in their
own session; that data is never written to the database.

Usage:
    from storage import get_storage
    store = get_storage()          # picks the backend for this request
    task = store.create_task({...})
    if task.user_id != store.owner_id: ...
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, MutableMapping, Optional, Protocol

from flask import current_app, session as flask_session
from flask_login import current_user

from db_stores import HabitStoreDB, TaskStoreDB
from habit_tracking import track_completion
from models import Habit, Task

logger = logging.getLogger(__name__)

GUEST_USER_ID = 0
GUEST_TASKS_KEY = "guest_tasks"
GUEST_HABITS_KEY = "guest_habits"


# ── Protocol ───────────────────────────────────────────────

class Storage(Protocol):
    owner_id: int

    def list_tasks(self) -> list[Task]: ...
    def tasks_on(self, day: str) -> list[Task]: ...
    def get_task(self, task_id: int) -> Optional[Task]: ...
    def create_task(self, fields: dict) -> Task: ...
    def update_task(self, task_id: int, fields: dict) -> Optional[Task]: ...
    def delete_task(self, task_id: int) -> bool: ...

    def list_habits(self) -> list[Habit]: ...
    def get_habit(self, habit_id: int) -> Optional[Habit]: ...
    def create_habit(self, fields: dict) -> Habit: ...
    def update_habit(self, habit_id: int, fields: dict) -> Optional[Habit]: ...
    def delete_habit(self, habit_id: int) -> bool: ...
    def track_habit(self, habit_id: int, today: Optional[date] = None) -> Optional[Habit]: ...


# ── Database Implementation ────────────────────────────────

class DatabaseStorage:
    """Thin adapter over the DB stores for one signed-in user."""

    def __init__(self, user_id: int) -> None:
        self.owner_id = user_id

    def list_tasks(self) -> list[Task]:
        return TaskStoreDB.list_for_user(self.owner_id)

    def tasks_on(self, day: str) -> list[Task]:
        return TaskStoreDB.list_by_date(self.owner_id, day)

    def get_task(self, task_id: int) -> Optional[Task]:
        return TaskStoreDB.get(task_id)

    def create_task(self, fields: dict) -> Task:
        return TaskStoreDB.create(self.owner_id, fields)

    def update_task(self, task_id: int, fields: dict) -> Optional[Task]:
        return TaskStoreDB.update(task_id, fields)

    def delete_task(self, task_id: int) -> bool:
        return TaskStoreDB.delete(task_id)

    def list_habits(self) -> list[Habit]:
        return HabitStoreDB.list_for_user(self.owner_id)

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        return HabitStoreDB.get(habit_id)

    def create_habit(self, fields: dict) -> Habit:
        return HabitStoreDB.create(self.owner_id, fields)

    def update_habit(self, habit_id: int, fields: dict) -> Optional[Habit]:
        return HabitStoreDB.update(habit_id, fields)

    def delete_habit(self, habit_id: int) -> bool:
        return HabitStoreDB.delete(habit_id)

    def track_habit(self, habit_id: int, today: Optional[date] = None) -> Optional[Habit]:
        habit = HabitStoreDB.get(habit_id)
        if habit is None:
            return None
        if track_completion(habit, today):
            habit = HabitStoreDB.update(habit_id, {
                "completed_days": habit.completed_days,
                "streak": habit.streak,
            })
        return habit


# ── Guest Session Implementation ───────────────────────────

class GuestStorage:
    """Per-visitor lists kept in the session, ids assigned sequentially."""

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self.owner_id = GUEST_USER_ID
        self._session = session

    def _load(self, key: str) -> list[dict]:
        return list(self._session.get(key) or [])

    def _save(self, key: str, items: list[dict]) -> None:
        self._session[key] = items
        # Flask only notices top-level assignments; be explicit for nested data
        if hasattr(self._session, "modified"):
            self._session.modified = True

    @staticmethod
    def _next_id(items: list[dict]) -> int:
        return max((item["id"] for item in items), default=0) + 1

    def _create(self, key: str, model, fields: dict):
        items = self._load(key)
        obj = model(id=self._next_id(items), user_id=GUEST_USER_ID, **fields)
        items.append(asdict(obj))
        self._save(key, items)
        return obj

    def _get(self, key: str, model, item_id: int):
        for item in self._load(key):
            if item["id"] == item_id:
                return model(**item)
        return None

    def _update(self, key: str, model, item_id: int, fields: dict):
        items = self._load(key)
        for i, item in enumerate(items):
            if item["id"] == item_id:
                merged = {**item, **fields, "id": item_id, "user_id": GUEST_USER_ID}
                items[i] = asdict(model(**merged))
                self._save(key, items)
                return model(**items[i])
        return None

    def _delete(self, key: str, item_id: int) -> bool:
        items = self._load(key)
        remaining = [item for item in items if item["id"] != item_id]
        if len(remaining) == len(items):
            return False
        self._save(key, remaining)
        return True

    def list_tasks(self) -> list[Task]:
        return [Task(**item) for item in self._load(GUEST_TASKS_KEY)]

    def tasks_on(self, day: str) -> list[Task]:
        return [t for t in self.list_tasks() if t.date == day]

    def get_task(self, task_id: int) -> Optional[Task]:
        return self._get(GUEST_TASKS_KEY, Task, task_id)

    def create_task(self, fields: dict) -> Task:
        return self._create(GUEST_TASKS_KEY, Task, fields)

    def update_task(self, task_id: int, fields: dict) -> Optional[Task]:
        return self._update(GUEST_TASKS_KEY, Task, task_id, fields)

    def delete_task(self, task_id: int) -> bool:
        return self._delete(GUEST_TASKS_KEY, task_id)

    def list_habits(self) -> list[Habit]:
        return [Habit(**item) for item in self._load(GUEST_HABITS_KEY)]

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        return self._get(GUEST_HABITS_KEY, Habit, habit_id)

    def create_habit(self, fields: dict) -> Habit:
        return self._create(GUEST_HABITS_KEY, Habit, fields)

    def update_habit(self, habit_id: int, fields: dict) -> Optional[Habit]:
        return self._update(GUEST_HABITS_KEY, Habit, habit_id, fields)

    def delete_habit(self, habit_id: int) -> bool:
        return self._delete(GUEST_HABITS_KEY, habit_id)

    def track_habit(self, habit_id: int, today: Optional[date] = None) -> Optional[Habit]:
        habit = self.get_habit(habit_id)
        if habit is None:
            return None
        if track_completion(habit, today):
            habit = self.update_habit(habit_id, {
                "completed_days": habit.completed_days,
                "streak": habit.streak,
            })
        return habit

    def clear(self) -> None:
        """Forget every guest task and habit."""
        self._session.pop(GUEST_TASKS_KEY, None)
        self._session.pop(GUEST_HABITS_KEY, None)


def is_guest() -> bool:
    """True when the visitor is using guest mode rather than an account."""
    return (
        not current_user.is_authenticated
        and bool(flask_session.get("guest"))
        and current_app.config.get("GUEST_MODE_ENABLED", True)
    )


def get_storage() -> Storage:
    """Backend for the current request: the database for users, the session for guests."""
    if current_user.is_authenticated:
        return DatabaseStorage(current_user.id)
    if is_guest():
        return GuestStorage(flask_session)
    raise RuntimeError("get_storage() called without a user or guest session")


def leave_guest_mode() -> None:
    """Drop the guest flag and everything the guest stored in the session."""
    GuestStorage(flask_session).clear()
    flask_session.pop("guest", None)
