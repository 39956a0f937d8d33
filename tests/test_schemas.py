"""Tests for schemas.py: request body validation."""

import pytest
from pydantic import ValidationError

from schemas import (
    FlashcardReview,
    HabitCreate,
    HabitUpdate,
    MeetingCreate,
    RegisterSchema,
    StudySessionCreate,
    StudySessionUpdate,
    TaskCreate,
    TaskUpdate,
)


class TestTaskSchemas:
    def test_camel_case_aliases(self):
        body = TaskCreate.model_validate({
            "name": "Lab report", "date": "2026-03-02",
            "startTime": "09:00", "endTime": "10:15", "isHabit": True,
        })
        dumped = body.model_dump()
        assert dumped["start_time"] == "09:00"
        assert dumped["is_habit"] is True
        assert dumped["priority"] == "medium"
        assert dumped["completed"] is False

    @pytest.mark.parametrize("field,value", [
        ("date", "02/03/2026"),
        ("startTime", "25:00"),
        ("priority", "urgent"),
        ("name", ""),
    ])
    def test_rejects_bad_values(self, field, value):
        data = {"name": "Lab", "date": "2026-03-02", "startTime": "09:00", "endTime": "10:00"}
        data[field] = value
        with pytest.raises(ValidationError):
            TaskCreate.model_validate(data)

    def test_missing_required(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({"name": "No times"})

    def test_update_only_reports_sent_fields(self):
        body = TaskUpdate.model_validate({"completed": True})
        assert body.changes() == {"completed": True}

    def test_update_rejects_null_for_required_column(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"name": None})

    def test_update_ignores_owner_field(self):
        body = TaskUpdate.model_validate({"userId": 99, "name": "Renamed"})
        assert body.changes() == {"name": "Renamed"}


class TestHabitSchemas:
    def test_target_range(self):
        with pytest.raises(ValidationError):
            HabitCreate.model_validate({"name": "Run", "target": 8})
        with pytest.raises(ValidationError):
            HabitCreate.model_validate({"name": "Run", "target": 0})

    def test_completed_days_accepts_json_string(self):
        body = HabitCreate.model_validate({
            "name": "Run", "target": 3, "completedDays": '["2026-03-01"]',
        })
        assert body.completed_days == ["2026-03-01"]

    def test_completed_days_rejects_garbage(self):
        with pytest.raises(ValidationError):
            HabitUpdate.model_validate({"completedDays": "not json"})


class TestMeetingSchema:
    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            MeetingCreate.model_validate({
                "name": "Standup", "date": "2026-03-02", "time": "09:00", "duration": 0,
            })

    def test_lists_default_empty(self):
        body = MeetingCreate.model_validate({
            "name": "Standup", "date": "2026-03-02", "time": "09:00", "duration": 15,
        })
        assert body.participants == []
        assert body.action_items == []


class TestStudySessionSchemas:
    def test_durations_optional(self):
        body = StudySessionCreate.model_validate({"subject": "Physics"})
        assert body.focus_duration is None
        assert body.break_duration is None

    def test_update_cannot_toggle_active(self):
        body = StudySessionUpdate.model_validate({"isActive": False, "subject": "Maths"})
        assert body.changes() == {"subject": "Maths"}


class TestAuthSchemas:
    def test_register_minimums(self):
        with pytest.raises(ValidationError):
            RegisterSchema.model_validate({"username": "ab", "password": "secret1"})
        with pytest.raises(ValidationError):
            RegisterSchema.model_validate({"username": "carol", "password": "12345"})

    def test_register_email_optional_but_checked(self):
        assert RegisterSchema.model_validate({"username": "carol", "password": "secret1"}).email is None
        with pytest.raises(ValidationError):
            RegisterSchema.model_validate({
                "username": "carol", "password": "secret1", "email": "nope",
            })

    def test_review_requires_correct(self):
        with pytest.raises(ValidationError):
            FlashcardReview.model_validate({})
