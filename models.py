"""
Entity dataclasses for ProTimer.

Each class maps one table row. ``from_row`` accepts a sqlite3.Row (or any
mapping with the table's snake_case columns) and ``to_dict`` produces the
camelCase JSON the frontend expects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

def _json_list(raw: Any) -> list:
    """Decode a JSON-array column, tolerating NULL and bad data."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []

@dataclass
class User:
    id: int
    username: str
    email: Optional[str] = None
    created_at: str = ""

    @classmethod
    def from_row(cls, r: Mapping) -> User:
        return cls(id=r["id"], username=r["username"], email=r["email"],
                   created_at=r["created_at"] or "")

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "email": self.email}

@dataclass
class Task:
    id: int
    user_id: int
    name: str
    date: str
    start_time: str
    end_time: str
    priority: str = "medium"
    completed: bool = False
    is_habit: bool = False

    @classmethod
    def from_row(cls, r: Mapping) -> Task:
        return cls(
            id=r["id"], user_id=r["user_id"], name=r["name"], date=r["date"],
            start_time=r["start_time"], end_time=r["end_time"], priority=r["priority"],
            completed=bool(r["completed"]), is_habit=bool(r["is_habit"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "priority": self.priority,
            "completed": self.completed,
            "isHabit": self.is_habit,
        }

@dataclass
class Habit:
    id: int
    user_id: int
    name: str
    target: int
    streak: int = 0
    completed_days: list[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, r: Mapping) -> Habit:
        return cls(
            id=r["id"], user_id=r["user_id"], name=r["name"], target=r["target"],
            streak=r["streak"] or 0, completed_days=_json_list(r["completed_days"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "target": self.target,
            "streak": self.streak,
            "completedDays": list(self.completed_days),
        }

@dataclass
class FlashcardDeck:
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    due_date: Optional[str] = None

    @classmethod
    def from_row(cls, r: Mapping) -> FlashcardDeck:
        return cls(id=r["id"], user_id=r["user_id"], name=r["name"],
                   description=r["description"], due_date=r["due_date"])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "dueDate": self.due_date,
        }

@dataclass
class Flashcard:
    id: int
    deck_id: int
    front: str
    back: str
    next_review: Optional[str] = None
    review_level: int = 0

    @classmethod
    def from_row(cls, r: Mapping) -> Flashcard:
        return cls(id=r["id"], deck_id=r["deck_id"], front=r["front"], back=r["back"],
                   next_review=r["next_review"], review_level=r["review_level"] or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "deckId": self.deck_id,
            "front": self.front,
            "back": self.back,
            "nextReview": self.next_review,
            "reviewLevel": self.review_level,
        }

@dataclass
class Meeting:
    id: int
    user_id: int
    name: str
    date: str
    time: str
    duration: int  # minutes
    agenda: Optional[str] = None
    notes: Optional[str] = None
    participants: list[str] = field(default_factory=list)
    action_items: list[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, r: Mapping) -> Meeting:
        return cls(
            id=r["id"], user_id=r["user_id"], name=r["name"], date=r["date"],
            time=r["time"], duration=r["duration"], agenda=r["agenda"], notes=r["notes"],
            participants=_json_list(r["participants"]),
            action_items=_json_list(r["action_items"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "date": self.date,
            "time": self.time,
            "duration": self.duration,
            "agenda": self.agenda,
            "notes": self.notes,
            "participants": list(self.participants),
            "actionItems": list(self.action_items),
        }

@dataclass
class StudySession:
    id: int
    user_id: int
    subject: str
    start_time: str
    task_name: Optional[str] = None
    end_time: Optional[str] = None
    duration: int = 0  # seconds
    is_active: bool = True
    break_duration: int = 300
    focus_duration: int = 1500
    created_at: str = ""

    @classmethod
    def from_row(cls, r: Mapping) -> StudySession:
        return cls(
            id=r["id"], user_id=r["user_id"], subject=r["subject"],
            start_time=r["start_time"], task_name=r["task_name"], end_time=r["end_time"],
            duration=r["duration"] or 0, is_active=bool(r["is_active"]),
            break_duration=r["break_duration"], focus_duration=r["focus_duration"],
            created_at=r["created_at"] or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "subject": self.subject,
            "taskName": self.task_name,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "isActive": self.is_active,
            "breakDuration": self.break_duration,
            "focusDuration": self.focus_duration,
            "createdAt": self.created_at,
        }

@dataclass
class StudyGroup:
    id: int
    name: str
    created_by: int
    description: Optional[str] = None
    is_private: bool = False
    created_at: str = ""

    @classmethod
    def from_row(cls, r: Mapping) -> StudyGroup:
        return cls(id=r["id"], name=r["name"], created_by=r["created_by"],
                   description=r["description"], is_private=bool(r["is_private"]),
                   created_at=r["created_at"] or "")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdBy": self.created_by,
            "isPrivate": self.is_private,
            "createdAt": self.created_at,
        }

@dataclass
class StudyGroupMember:
    group_id: int
    user_id: int
    status: str = "active"
    joined_at: str = ""
    username: Optional[str] = None

    @classmethod
    def from_row(cls, r: Mapping) -> StudyGroupMember:
        keys = r.keys()
        return cls(group_id=r["group_id"], user_id=r["user_id"], status=r["status"],
                   joined_at=r["joined_at"] or "",
                   username=r["username"] if "username" in keys else None)

    def to_dict(self) -> dict:
        data = {
            "groupId": self.group_id,
            "userId": self.user_id,
            "status": self.status,
            "joinedAt": self.joined_at,
        }
        if self.username is not None:
            data["username"] = self.username
        return data
