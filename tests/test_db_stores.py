"""Tests for db_stores.py: store-level behaviour against a real SQLite file."""

import sqlite3
from datetime import date, datetime, timedelta

import pytest

import db_stores
from db_stores import (
    REVIEW_INTERVALS,
    FlashcardDeckStoreDB,
    FlashcardStoreDB,
    HabitStoreDB,
    MeetingStoreDB,
    StudyGroupStoreDB,
    StudySessionStoreDB,
    TaskStoreDB,
    UserStoreDB,
)

TASK = {"name": "Essay", "date": "2026-03-02", "start_time": "09:00", "end_time": "10:00"}


class TestUserStore:
    def test_get_hides_password_hash(self, db):
        user = UserStoreDB.get(1)
        assert user.username == "alice"
        assert "password_hash" not in user.to_dict()

    def test_get_by_username_returns_row(self, db):
        row = UserStoreDB.get_by_username("bob")
        assert row["id"] == 2
        assert row["login_attempts"] == 0

    def test_lockout_bookkeeping(self, db):
        UserStoreDB.record_failed_login(1, 5, "2099-01-01T00:00:00")
        row = UserStoreDB.get_by_username("alice")
        assert row["login_attempts"] == 5
        UserStoreDB.reset_lockout(1)
        row = UserStoreDB.get_by_username("alice")
        assert row["login_attempts"] == 0
        assert row["locked_until"] == ""


class TestTaskStore:
    def test_list_scoped_to_owner(self, db):
        TaskStoreDB.create(1, TASK)
        TaskStoreDB.create(2, TASK)
        assert [t.user_id for t in TaskStoreDB.list_for_user(1)] == [1]

    def test_list_by_date(self, db):
        TaskStoreDB.create(1, TASK)
        TaskStoreDB.create(1, {**TASK, "date": "2026-03-03"})
        tasks = TaskStoreDB.list_by_date(1, "2026-03-03")
        assert len(tasks) == 1
        assert tasks[0].date == "2026-03-03"

    def test_update_ignores_owner_and_id(self, db):
        task = TaskStoreDB.create(1, TASK)
        updated = TaskStoreDB.update(task.id, {"user_id": 2, "id": 99, "completed": True})
        assert updated.id == task.id
        assert updated.user_id == 1
        assert updated.completed is True

    def test_delete(self, db):
        task = TaskStoreDB.create(1, TASK)
        assert TaskStoreDB.delete(task.id) is True
        assert TaskStoreDB.get(task.id) is None
        assert TaskStoreDB.delete(task.id) is False


class TestHabitStore:
    def test_completed_days_round_trip_as_list(self, db):
        habit = HabitStoreDB.create(1, {"name": "Run", "target": 3, "completed_days": ["2026-03-01"]})
        assert HabitStoreDB.get(habit.id).completed_days == ["2026-03-01"]
        raw = db.execute("SELECT completed_days FROM habits WHERE id=?", (habit.id,)).fetchone()[0]
        assert raw == '["2026-03-01"]'


class TestFlashcardStores:
    def test_deck_delete_removes_cards(self, db):
        deck = FlashcardDeckStoreDB.create(1, {"name": "Spanish"})
        FlashcardStoreDB.create(deck.id, {"front": "hola", "back": "hello"})
        assert FlashcardDeckStoreDB.delete(deck.id) is True
        assert FlashcardStoreDB.list_for_deck(deck.id) == []

    def test_due_cards(self, db):
        deck = FlashcardDeckStoreDB.create(1, {"name": "Spanish"})
        new = FlashcardStoreDB.create(deck.id, {"front": "uno", "back": "one"})
        FlashcardStoreDB.create(deck.id, {"front": "dos", "back": "two", "next_review": "2099-01-01"})
        due = FlashcardStoreDB.due_for_deck(deck.id, on=date(2026, 3, 2))
        assert [c.id for c in due] == [new.id]

    def test_review_correct_moves_up(self, db):
        deck = FlashcardDeckStoreDB.create(1, {"name": "Spanish"})
        card = FlashcardStoreDB.create(deck.id, {"front": "tres", "back": "three"})
        reviewed = FlashcardStoreDB.review(card.id, True, on=date(2026, 3, 2))
        assert reviewed.review_level == 1
        assert reviewed.next_review == (date(2026, 3, 2) + timedelta(days=REVIEW_INTERVALS[1])).isoformat()

    def test_review_caps_and_resets(self, db):
        deck = FlashcardDeckStoreDB.create(1, {"name": "Spanish"})
        card = FlashcardStoreDB.create(deck.id, {"front": "x", "back": "y", "review_level": 5})
        assert FlashcardStoreDB.review(card.id, True).review_level == 5
        wrong = FlashcardStoreDB.review(card.id, False, on=date(2026, 3, 2))
        assert wrong.review_level == 0
        assert wrong.next_review == "2026-03-03"


class TestMeetingStore:
    def test_lists_stored_as_json(self, db):
        meeting = MeetingStoreDB.create(1, {
            "name": "Retro", "date": "2026-03-02", "time": "15:00", "duration": 45,
            "participants": ["Ana", "Raj"], "action_items": [],
        })
        loaded = MeetingStoreDB.get(meeting.id)
        assert loaded.participants == ["Ana", "Raj"]
        assert loaded.to_dict()["actionItems"] == []


class TestStudySessionStore:
    def test_single_active_session(self, db):
        first = StudySessionStoreDB.create(1, {"subject": "Maths"})
        second = StudySessionStoreDB.create(1, {"subject": "Physics"})
        assert StudySessionStoreDB.get(first.id).is_active is False
        assert StudySessionStoreDB.active_for_user(1).id == second.id
        active = db.execute(
            "SELECT COUNT(*) FROM study_sessions WHERE user_id=1 AND is_active=1"
        ).fetchone()[0]
        assert active == 1

    def test_failed_start_keeps_previous_session_active(self, db):
        first = StudySessionStoreDB.create(1, {"subject": "Maths"})
        with pytest.raises(sqlite3.IntegrityError):
            StudySessionStoreDB.create(1, {})
        assert StudySessionStoreDB.get(first.id).is_active is True
        total = db.execute("SELECT COUNT(*) FROM study_sessions WHERE user_id=1").fetchone()[0]
        assert total == 1

    def test_other_users_unaffected(self, db):
        bobs = StudySessionStoreDB.create(2, {"subject": "History"})
        StudySessionStoreDB.create(1, {"subject": "Maths"})
        assert StudySessionStoreDB.get(bobs.id).is_active is True

    def test_defaults(self, db):
        session = StudySessionStoreDB.create(1, {"subject": "Maths"})
        assert session.focus_duration == 1500
        assert session.break_duration == 300
        assert session.duration == 0

    def test_stop_records_whole_seconds(self, db):
        start = datetime(2026, 3, 2, 9, 0, 0)
        session = StudySessionStoreDB.create(1, {"subject": "Maths"}, started_at=start)
        stopped = StudySessionStoreDB.stop(session.id, ended_at=start + timedelta(seconds=90.7))
        assert stopped.is_active is False
        assert stopped.duration == 90
        assert stopped.end_time.startswith("2026-03-02T09:01:30")

    def test_stop_clamps_negative(self, db):
        start = datetime(2026, 3, 2, 9, 0, 0)
        session = StudySessionStoreDB.create(1, {"subject": "Maths"}, started_at=start)
        stopped = StudySessionStoreDB.stop(session.id, ended_at=start - timedelta(seconds=5))
        assert stopped.duration == 0

    def test_stop_twice_is_unchanged(self, db):
        start = datetime(2026, 3, 2, 9, 0, 0)
        session = StudySessionStoreDB.create(1, {"subject": "Maths"}, started_at=start)
        first = StudySessionStoreDB.stop(session.id, ended_at=start + timedelta(minutes=10))
        second = StudySessionStoreDB.stop(session.id, ended_at=start + timedelta(minutes=30))
        assert second.duration == first.duration == 600
        assert second.end_time == first.end_time

    def test_totals_by_subject(self, db):
        start = datetime(2026, 3, 2, 9, 0, 0)
        for subject, minutes in [("Maths", 10), ("Maths", 5), ("Art", 20)]:
            s = StudySessionStoreDB.create(1, {"subject": subject}, started_at=start)
            StudySessionStoreDB.stop(s.id, ended_at=start + timedelta(minutes=minutes))
        assert StudySessionStoreDB.totals_by_subject(1) == [
            {"subject": "Art", "duration": 1200},
            {"subject": "Maths", "duration": 900},
        ]


class TestStudyGroupStore:
    def test_create_adds_single_admin_membership(self, db):
        group = StudyGroupStoreDB.create(1, {"name": "Math"})
        rows = db.execute(
            "SELECT user_id, status FROM study_group_members WHERE group_id=?", (group.id,)
        ).fetchall()
        assert [(r["user_id"], r["status"]) for r in rows] == [(1, "admin")]

    def test_failed_membership_leaves_no_group(self, db, monkeypatch):
        real_insert = db_stores._insert

        def failing_insert(table, values):
            if table == "study_group_members":
                raise sqlite3.IntegrityError("membership insert failed")
            return real_insert(table, values)

        monkeypatch.setattr(db_stores, "_insert", failing_insert)
        with pytest.raises(sqlite3.IntegrityError):
            StudyGroupStoreDB.create(1, {"name": "Math"})
        assert db.execute("SELECT COUNT(*) FROM study_groups").fetchone()[0] == 0
        assert db.execute("SELECT COUNT(*) FROM study_group_members").fetchone()[0] == 0

    def test_search_treats_wildcards_literally(self, db):
        StudyGroupStoreDB.create(1, {"name": "Math"})
        StudyGroupStoreDB.create(1, {"name": "Bio_lab", "description": "100% attendance"})
        assert [g.name for g in StudyGroupStoreDB.search("_")] == ["Bio_lab"]
        assert [g.name for g in StudyGroupStoreDB.search("%")] == ["Bio_lab"]
        assert StudyGroupStoreDB.search("Ma_h") == []

    def test_search_excludes_private(self, db):
        StudyGroupStoreDB.create(1, {"name": "Math public"})
        StudyGroupStoreDB.create(1, {"name": "Math secret", "is_private": True})
        names = [g.name for g in StudyGroupStoreDB.search("Math")]
        assert names == ["Math public"]

    def test_search_matches_description(self, db):
        StudyGroupStoreDB.create(1, {"name": "Night owls", "description": "late calculus grind"})
        assert [g.name for g in StudyGroupStoreDB.search("calculus")] == ["Night owls"]

    def test_join_twice_returns_none(self, db):
        group = StudyGroupStoreDB.create(1, {"name": "Math"})
        assert StudyGroupStoreDB.join(group.id, 2).status == "active"
        assert StudyGroupStoreDB.join(group.id, 2) is None

    def test_members_in_join_order(self, db):
        group = StudyGroupStoreDB.create(1, {"name": "Math"})
        StudyGroupStoreDB.join(group.id, 2)
        assert StudyGroupStoreDB.member_ids(group.id) == [1, 2]
        assert [m.username for m in StudyGroupStoreDB.members(group.id)] == ["alice", "bob"]

    def test_for_member_and_leave(self, db):
        group = StudyGroupStoreDB.create(1, {"name": "Math"})
        StudyGroupStoreDB.join(group.id, 2)
        assert [g.id for g in StudyGroupStoreDB.for_member(2)] == [group.id]
        assert StudyGroupStoreDB.leave(group.id, 2) is True
        assert StudyGroupStoreDB.for_member(2) == []

    def test_delete_removes_memberships(self, db):
        group = StudyGroupStoreDB.create(1, {"name": "Math"})
        StudyGroupStoreDB.join(group.id, 2)
        assert StudyGroupStoreDB.delete(group.id) is True
        left = db.execute(
            "SELECT COUNT(*) FROM study_group_members WHERE group_id=?", (group.id,)
        ).fetchone()[0]
        assert left == 0
