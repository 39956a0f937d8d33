"""
Request body schemas.

Create schemas validate a full payload; Update schemas accept any subset of
the mutable fields. Field aliases are the camelCase names used on the wire,
and ``model_dump()`` yields the snake_case column names the stores expect.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Priority = Literal["high", "medium", "low"]


def _decode_list(value: Any) -> Any:
    """Accept a list or its JSON-serialised form (older clients send strings)."""
    if isinstance(value, str):
        try:
            return json.loads(value) if value.strip() else []
        except ValueError:
            raise ValueError("must be a list or a JSON-encoded list")
    if value is None:
        return []
    return value


StringList = Annotated[list[str], BeforeValidator(_decode_list)]


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _Partial(_Schema):
    """Base for update payloads: omitted fields are left untouched, null is
    rejected for columns that cannot be NULL."""

    not_null: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.model_fields_set:
            if name in self.not_null and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# ── Auth ─────────────────────────────────────────────────────────────


class RegisterSchema(_Schema):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6, max_length=256)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)


class LoginSchema(_Schema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


# ── Tasks ────────────────────────────────────────────────────────────


class TaskCreate(_Schema):
    name: str = Field(min_length=1, max_length=200)
    date: str = Field(pattern=DATE_PATTERN)
    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: str = Field(alias="endTime", pattern=TIME_PATTERN)
    priority: Priority = "medium"
    completed: bool = False
    is_habit: bool = Field(default=False, alias="isHabit")


class TaskUpdate(_Partial):
    not_null = ("name", "date", "start_time", "end_time", "priority", "completed", "is_habit")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    start_time: Optional[str] = Field(default=None, alias="startTime", pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, alias="endTime", pattern=TIME_PATTERN)
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    is_habit: Optional[bool] = Field(default=None, alias="isHabit")


# ── Habits ───────────────────────────────────────────────────────────


class HabitCreate(_Schema):
    name: str = Field(min_length=1, max_length=200)
    target: int = Field(ge=1, le=7)
    streak: int = Field(default=0, ge=0)
    completed_days: StringList = Field(default_factory=list, alias="completedDays")


class HabitUpdate(_Partial):
    not_null = ("name", "target", "streak", "completed_days")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    target: Optional[int] = Field(default=None, ge=1, le=7)
    streak: Optional[int] = Field(default=None, ge=0)
    completed_days: Optional[StringList] = Field(default=None, alias="completedDays")


# ── Flashcards ───────────────────────────────────────────────────────


class DeckCreate(_Schema):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate", pattern=DATE_PATTERN)


class DeckUpdate(_Partial):
    not_null = ("name",)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate", pattern=DATE_PATTERN)


class FlashcardCreate(_Schema):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    next_review: Optional[str] = Field(default=None, alias="nextReview", pattern=DATE_PATTERN)
    review_level: int = Field(default=0, ge=0, alias="reviewLevel")


class FlashcardUpdate(_Partial):
    not_null = ("front", "back", "review_level")

    front: Optional[str] = Field(default=None, min_length=1)
    back: Optional[str] = Field(default=None, min_length=1)
    next_review: Optional[str] = Field(default=None, alias="nextReview", pattern=DATE_PATTERN)
    review_level: Optional[int] = Field(default=None, ge=0, alias="reviewLevel")


class FlashcardReview(_Schema):
    correct: bool


# ── Meetings ─────────────────────────────────────────────────────────


class MeetingCreate(_Schema):
    name: str = Field(min_length=1, max_length=200)
    date: str = Field(pattern=DATE_PATTERN)
    time: str = Field(pattern=TIME_PATTERN)
    duration: int = Field(gt=0)
    agenda: Optional[str] = None
    notes: Optional[str] = None
    participants: StringList = Field(default_factory=list)
    action_items: StringList = Field(default_factory=list, alias="actionItems")


class MeetingUpdate(_Partial):
    not_null = ("name", "date", "time", "duration", "participants", "action_items")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    duration: Optional[int] = Field(default=None, gt=0)
    agenda: Optional[str] = None
    notes: Optional[str] = None
    participants: Optional[StringList] = None
    action_items: Optional[StringList] = Field(default=None, alias="actionItems")


# ── Study sessions ───────────────────────────────────────────────────


class StudySessionCreate(_Schema):
    subject: str = Field(min_length=1, max_length=200)
    task_name: Optional[str] = Field(default=None, alias="taskName")
    break_duration: Optional[int] = Field(default=None, ge=0, alias="breakDuration")
    focus_duration: Optional[int] = Field(default=None, gt=0, alias="focusDuration")


class StudySessionUpdate(_Partial):
    not_null = ("subject", "duration", "break_duration", "focus_duration")

    subject: Optional[str] = Field(default=None, min_length=1, max_length=200)
    task_name: Optional[str] = Field(default=None, alias="taskName")
    duration: Optional[int] = Field(default=None, ge=0)
    break_duration: Optional[int] = Field(default=None, ge=0, alias="breakDuration")
    focus_duration: Optional[int] = Field(default=None, gt=0, alias="focusDuration")


# ── Study groups ─────────────────────────────────────────────────────


class StudyGroupCreate(_Schema):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    is_private: bool = Field(default=False, alias="isPrivate")


class StudyGroupUpdate(_Partial):
    not_null = ("name", "is_private")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    is_private: Optional[bool] = Field(default=None, alias="isPrivate")
