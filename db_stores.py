"""
DB-backed store classes for ProTimer.

One store per entity. Stores only fetch and write: they never decide whether
the caller may see a row. List operations are scoped by the owning user id;
``get`` returns the row whatever its owner so the route layer can tell a
missing resource (404) from someone else's (403).
"""

from __future__ import annotations

import json
import math
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from database import get_db, transaction
from models import (
    Flashcard,
    FlashcardDeck,
    Habit,
    Meeting,
    StudyGroup,
    StudyGroupMember,
    StudySession,
    Task,
    User,
)

# Spaced repetition: days until next review, indexed by review level
REVIEW_INTERVALS = [1, 2, 4, 7, 15, 30]
MAX_REVIEW_LEVEL = len(REVIEW_INTERVALS) - 1

JSON_COLUMNS = {"completed_days", "participants", "action_items"}
BOOL_COLUMNS = {"completed", "is_habit", "is_active", "is_private"}


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS:
        return json.dumps(list(value or []))
    if column in BOOL_COLUMNS:
        return 1 if value else 0
    return value


def _insert(table: str, values: dict) -> int:
    """INSERT one row (no commit) and return its id."""
    columns = list(values)
    placeholders = ", ".join("?" for _ in columns)
    cur = get_db().execute(
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
        tuple(_encode(c, values[c]) for c in columns),
    )
    return cur.lastrowid


def _update(table: str, row_id: int, fields: dict, allowed: Iterable[str]) -> bool:
    """UPDATE the whitelisted columns of one row and commit."""
    allowed = set(allowed)
    changes = {k: v for k, v in fields.items() if k in allowed}
    if not changes:
        return False
    assignments = ", ".join(f"{c}=?" for c in changes)
    db = get_db()
    db.execute(
        f"UPDATE {table} SET {assignments} WHERE id=?",
        (*(_encode(c, v) for c, v in changes.items()), row_id),
    )
    db.commit()
    return True


def _delete(table: str, row_id: int) -> bool:
    db = get_db()
    cur = db.execute(f"DELETE FROM {table} WHERE id=?", (row_id,))
    db.commit()
    return cur.rowcount > 0


# ── Users ────────────────────────────────────────────────────────────


class UserStoreDB:
    """Accounts and login lockout bookkeeping."""

    @staticmethod
    def get(user_id: int) -> Optional[User]:
        row = get_db().execute("SELECT * FROM users WHERE id=?", (user_id,)).fetchone()
        return User.from_row(row) if row else None

    @staticmethod
    def get_by_username(username: str):
        """Return the raw row (including password hash and lockout columns)."""
        return get_db().execute(
            "SELECT * FROM users WHERE username=?", (username,)
        ).fetchone()

    @staticmethod
    def create(username: str, password_hash: str, email: Optional[str] = None) -> User:
        db = get_db()
        user_id = _insert("users", {
            "username": username,
            "password_hash": password_hash,
            "email": email,
            "created_at": datetime.now().isoformat(),
        })
        db.commit()
        return UserStoreDB.get(user_id)

    @staticmethod
    def record_failed_login(user_id: int, attempts: int, locked_until: str = "") -> None:
        db = get_db()
        db.execute(
            "UPDATE users SET login_attempts=?, locked_until=? WHERE id=?",
            (attempts, locked_until, user_id),
        )
        db.commit()

    @staticmethod
    def reset_lockout(user_id: int) -> None:
        db = get_db()
        db.execute("UPDATE users SET login_attempts=0, locked_until='' WHERE id=?", (user_id,))
        db.commit()


# ── Tasks ────────────────────────────────────────────────────────────


class TaskStoreDB:
    COLUMNS = ("name", "date", "start_time", "end_time", "priority", "completed", "is_habit")

    @staticmethod
    def list_for_user(user_id: int) -> list[Task]:
        rows = get_db().execute(
            "SELECT * FROM tasks WHERE user_id=? ORDER BY date, start_time, id", (user_id,)
        ).fetchall()
        return [Task.from_row(r) for r in rows]

    @staticmethod
    def list_by_date(user_id: int, day: str) -> list[Task]:
        rows = get_db().execute(
            "SELECT * FROM tasks WHERE user_id=? AND date=? ORDER BY start_time, id",
            (user_id, day),
        ).fetchall()
        return [Task.from_row(r) for r in rows]

    @staticmethod
    def get(task_id: int) -> Optional[Task]:
        row = get_db().execute("SELECT * FROM tasks WHERE id=?", (task_id,)).fetchone()
        return Task.from_row(row) if row else None

    @staticmethod
    def create(user_id: int, fields: dict) -> Task:
        values = {c: fields[c] for c in TaskStoreDB.COLUMNS if c in fields}
        task_id = _insert("tasks", {"user_id": user_id, **values})
        get_db().commit()
        return TaskStoreDB.get(task_id)

    @staticmethod
    def update(task_id: int, fields: dict) -> Optional[Task]:
        _update("tasks", task_id, fields, TaskStoreDB.COLUMNS)
        return TaskStoreDB.get(task_id)

    @staticmethod
    def delete(task_id: int) -> bool:
        return _delete("tasks", task_id)


# ── Habits ───────────────────────────────────────────────────────────


class HabitStoreDB:
    COLUMNS = ("name", "target", "streak", "completed_days")

    @staticmethod
    def list_for_user(user_id: int) -> list[Habit]:
        rows = get_db().execute(
            "SELECT * FROM habits WHERE user_id=? ORDER BY id", (user_id,)
        ).fetchall()
        return [Habit.from_row(r) for r in rows]

    @staticmethod
    def get(habit_id: int) -> Optional[Habit]:
        row = get_db().execute("SELECT * FROM habits WHERE id=?", (habit_id,)).fetchone()
        return Habit.from_row(row) if row else None

    @staticmethod
    def create(user_id: int, fields: dict) -> Habit:
        values = {c: fields[c] for c in HabitStoreDB.COLUMNS if c in fields}
        habit_id = _insert("habits", {"user_id": user_id, **values})
        get_db().commit()
        return HabitStoreDB.get(habit_id)

    @staticmethod
    def update(habit_id: int, fields: dict) -> Optional[Habit]:
        _update("habits", habit_id, fields, HabitStoreDB.COLUMNS)
        return HabitStoreDB.get(habit_id)

    @staticmethod
    def delete(habit_id: int) -> bool:
        return _delete("habits", habit_id)


# ── Flashcards ───────────────────────────────────────────────────────


class FlashcardDeckStoreDB:
    COLUMNS = ("name", "description", "due_date")

    @staticmethod
    def list_for_user(user_id: int) -> list[FlashcardDeck]:
        rows = get_db().execute(
            "SELECT * FROM flashcard_decks WHERE user_id=? ORDER BY id", (user_id,)
        ).fetchall()
        return [FlashcardDeck.from_row(r) for r in rows]

    @staticmethod
    def get(deck_id: int) -> Optional[FlashcardDeck]:
        row = get_db().execute("SELECT * FROM flashcard_decks WHERE id=?", (deck_id,)).fetchone()
        return FlashcardDeck.from_row(row) if row else None

    @staticmethod
    def create(user_id: int, fields: dict) -> FlashcardDeck:
        values = {c: fields[c] for c in FlashcardDeckStoreDB.COLUMNS if c in fields}
        deck_id = _insert("flashcard_decks", {"user_id": user_id, **values})
        get_db().commit()
        return FlashcardDeckStoreDB.get(deck_id)

    @staticmethod
    def update(deck_id: int, fields: dict) -> Optional[FlashcardDeck]:
        _update("flashcard_decks", deck_id, fields, FlashcardDeckStoreDB.COLUMNS)
        return FlashcardDeckStoreDB.get(deck_id)

    @staticmethod
    def delete(deck_id: int) -> bool:
        """Delete a deck and its cards."""
        with transaction() as db:
            db.execute("DELETE FROM flashcards WHERE deck_id=?", (deck_id,))
            cur = db.execute("DELETE FROM flashcard_decks WHERE id=?", (deck_id,))
        return cur.rowcount > 0


class FlashcardStoreDB:
    COLUMNS = ("front", "back", "next_review", "review_level")

    @staticmethod
    def list_for_deck(deck_id: int) -> list[Flashcard]:
        rows = get_db().execute(
            "SELECT * FROM flashcards WHERE deck_id=? ORDER BY id", (deck_id,)
        ).fetchall()
        return [Flashcard.from_row(r) for r in rows]

    @staticmethod
    def due_for_deck(deck_id: int, on: Optional[date] = None) -> list[Flashcard]:
        """Cards never reviewed or due on/before ``on`` (today by default)."""
        day = (on or date.today()).isoformat()
        rows = get_db().execute(
            "SELECT * FROM flashcards WHERE deck_id=? "
            "AND (next_review IS NULL OR next_review <= ?) ORDER BY id",
            (deck_id, day),
        ).fetchall()
        return [Flashcard.from_row(r) for r in rows]

    @staticmethod
    def get(card_id: int) -> Optional[Flashcard]:
        row = get_db().execute("SELECT * FROM flashcards WHERE id=?", (card_id,)).fetchone()
        return Flashcard.from_row(row) if row else None

    @staticmethod
    def create(deck_id: int, fields: dict) -> Flashcard:
        values = {c: fields[c] for c in FlashcardStoreDB.COLUMNS if c in fields}
        card_id = _insert("flashcards", {"deck_id": deck_id, **values})
        get_db().commit()
        return FlashcardStoreDB.get(card_id)

    @staticmethod
    def update(card_id: int, fields: dict) -> Optional[Flashcard]:
        _update("flashcards", card_id, fields, FlashcardStoreDB.COLUMNS)
        return FlashcardStoreDB.get(card_id)

    @staticmethod
    def delete(card_id: int) -> bool:
        return _delete("flashcards", card_id)

    @staticmethod
    def review(card_id: int, correct: bool, on: Optional[date] = None) -> Optional[Flashcard]:
        """Move a card up one level when answered correctly, back to 0 otherwise."""
        card = FlashcardStoreDB.get(card_id)
        if card is None:
            return None
        level = min(card.review_level + 1, MAX_REVIEW_LEVEL) if correct else 0
        next_review = ((on or date.today()) + timedelta(days=REVIEW_INTERVALS[level])).isoformat()
        return FlashcardStoreDB.update(card_id, {"review_level": level, "next_review": next_review})


# ── Meetings ─────────────────────────────────────────────────────────


class MeetingStoreDB:
    COLUMNS = ("name", "date", "time", "duration", "agenda", "notes",
               "participants", "action_items")

    @staticmethod
    def list_for_user(user_id: int) -> list[Meeting]:
        rows = get_db().execute(
            "SELECT * FROM meetings WHERE user_id=? ORDER BY date, time, id", (user_id,)
        ).fetchall()
        return [Meeting.from_row(r) for r in rows]

    @staticmethod
    def get(meeting_id: int) -> Optional[Meeting]:
        row = get_db().execute("SELECT * FROM meetings WHERE id=?", (meeting_id,)).fetchone()
        return Meeting.from_row(row) if row else None

    @staticmethod
    def create(user_id: int, fields: dict) -> Meeting:
        values = {c: fields[c] for c in MeetingStoreDB.COLUMNS if c in fields}
        meeting_id = _insert("meetings", {"user_id": user_id, **values})
        get_db().commit()
        return MeetingStoreDB.get(meeting_id)

    @staticmethod
    def update(meeting_id: int, fields: dict) -> Optional[Meeting]:
        _update("meetings", meeting_id, fields, MeetingStoreDB.COLUMNS)
        return MeetingStoreDB.get(meeting_id)

    @staticmethod
    def delete(meeting_id: int) -> bool:
        return _delete("meetings", meeting_id)


# ── Study sessions ───────────────────────────────────────────────────


class StudySessionStoreDB:
    """Pomodoro sessions. At most one active session per user."""

    COLUMNS = ("subject", "task_name", "duration", "break_duration", "focus_duration")

    @staticmethod
    def list_for_user(user_id: int) -> list[StudySession]:
        rows = get_db().execute(
            "SELECT * FROM study_sessions WHERE user_id=? ORDER BY start_time DESC, id DESC",
            (user_id,),
        ).fetchall()
        return [StudySession.from_row(r) for r in rows]

    @staticmethod
    def get(session_id: int) -> Optional[StudySession]:
        row = get_db().execute(
            "SELECT * FROM study_sessions WHERE id=?", (session_id,)
        ).fetchone()
        return StudySession.from_row(row) if row else None

    @staticmethod
    def active_for_user(user_id: int) -> Optional[StudySession]:
        row = get_db().execute(
            "SELECT * FROM study_sessions WHERE user_id=? AND is_active=1 "
            "ORDER BY start_time DESC, id DESC LIMIT 1",
            (user_id,),
        ).fetchone()
        return StudySession.from_row(row) if row else None

    @staticmethod
    def create(user_id: int, fields: dict, started_at: Optional[datetime] = None) -> StudySession:
        """Start a session, deactivating any session the user still has running."""
        now = (started_at or datetime.now()).isoformat()
        values = {c: fields[c] for c in StudySessionStoreDB.COLUMNS
                  if fields.get(c) is not None}
        with transaction() as db:
            db.execute(
                "UPDATE study_sessions SET is_active=0 WHERE user_id=? AND is_active=1",
                (user_id,),
            )
            session_id = _insert("study_sessions", {
                "user_id": user_id,
                **values,
                "start_time": now,
                "is_active": True,
                "created_at": now,
            })
        return StudySessionStoreDB.get(session_id)

    @staticmethod
    def stop(session_id: int, ended_at: Optional[datetime] = None) -> Optional[StudySession]:
        """Close a session, recording its end time and whole-second duration."""
        session = StudySessionStoreDB.get(session_id)
        if session is None or not session.is_active:
            return session
        end = ended_at or datetime.now()
        elapsed = (end - datetime.fromisoformat(session.start_time)).total_seconds()
        duration = max(0, math.floor(elapsed))
        db = get_db()
        db.execute(
            "UPDATE study_sessions SET end_time=?, duration=?, is_active=0 WHERE id=?",
            (end.isoformat(), duration, session_id),
        )
        db.commit()
        return StudySessionStoreDB.get(session_id)

    @staticmethod
    def update(session_id: int, fields: dict) -> Optional[StudySession]:
        _update("study_sessions", session_id, fields, StudySessionStoreDB.COLUMNS)
        return StudySessionStoreDB.get(session_id)

    @staticmethod
    def delete(session_id: int) -> bool:
        return _delete("study_sessions", session_id)

    @staticmethod
    def totals_by_subject(user_id: int) -> list[dict]:
        rows = get_db().execute(
            "SELECT subject, COALESCE(SUM(duration), 0) AS duration FROM study_sessions "
            "WHERE user_id=? GROUP BY subject ORDER BY duration DESC, subject",
            (user_id,),
        ).fetchall()
        return [{"subject": r["subject"], "duration": r["duration"]} for r in rows]

    @staticmethod
    def totals_for_users(user_ids: list[int]) -> dict[int, int]:
        """Lifetime study seconds per user; users with no sessions are absent."""
        if not user_ids:
            return {}
        placeholders = ",".join("?" * len(user_ids))
        rows = get_db().execute(
            f"SELECT user_id, COALESCE(SUM(duration), 0) AS total FROM study_sessions "
            f"WHERE user_id IN ({placeholders}) GROUP BY user_id",
            tuple(user_ids),
        ).fetchall()
        return {r["user_id"]: r["total"] for r in rows}

    @staticmethod
    def active_for_users(user_ids: list[int]) -> list[dict]:
        """Running sessions of the given users, each with the owner's username."""
        if not user_ids:
            return []
        placeholders = ",".join("?" * len(user_ids))
        rows = get_db().execute(
            f"SELECT s.*, u.username FROM study_sessions s "
            f"JOIN users u ON s.user_id = u.id "
            f"WHERE s.is_active=1 AND s.user_id IN ({placeholders}) "
            f"ORDER BY s.start_time, s.id",
            tuple(user_ids),
        ).fetchall()
        return [{**StudySession.from_row(r).to_dict(), "username": r["username"]} for r in rows]


# ── Study groups ─────────────────────────────────────────────────────


class StudyGroupStoreDB:
    """Study groups and their memberships."""

    COLUMNS = ("name", "description", "is_private")

    @staticmethod
    def get(group_id: int) -> Optional[StudyGroup]:
        row = get_db().execute("SELECT * FROM study_groups WHERE id=?", (group_id,)).fetchone()
        return StudyGroup.from_row(row) if row else None

    @staticmethod
    def created_by(user_id: int) -> list[StudyGroup]:
        rows = get_db().execute(
            "SELECT * FROM study_groups WHERE created_by=? ORDER BY created_at DESC, id DESC",
            (user_id,),
        ).fetchall()
        return [StudyGroup.from_row(r) for r in rows]

    @staticmethod
    def for_member(user_id: int) -> list[StudyGroup]:
        rows = get_db().execute(
            "SELECT g.* FROM study_group_members m "
            "JOIN study_groups g ON m.group_id = g.id "
            "WHERE m.user_id=? AND m.status IN ('active', 'admin') "
            "ORDER BY g.created_at DESC, g.id DESC",
            (user_id,),
        ).fetchall()
        return [StudyGroup.from_row(r) for r in rows]

    @staticmethod
    def search(term: str) -> list[StudyGroup]:
        """Public groups whose name or description contains ``term`` literally."""
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        rows = get_db().execute(
            "SELECT * FROM study_groups WHERE is_private=0 "
            "AND (name LIKE ? ESCAPE '\\' OR COALESCE(description, '') LIKE ? ESCAPE '\\') "
            "ORDER BY name, id",
            (pattern, pattern),
        ).fetchall()
        return [StudyGroup.from_row(r) for r in rows]

    @staticmethod
    def create(created_by: int, fields: dict) -> StudyGroup:
        """Create a group and make its creator an admin member, atomically."""
        now = datetime.now().isoformat()
        values = {c: fields[c] for c in StudyGroupStoreDB.COLUMNS if c in fields}
        with transaction():
            group_id = _insert("study_groups", {
                **values,
                "created_by": created_by,
                "created_at": now,
            })
            _insert("study_group_members", {
                "group_id": group_id,
                "user_id": created_by,
                "status": "admin",
                "joined_at": now,
            })
        return StudyGroupStoreDB.get(group_id)

    @staticmethod
    def update(group_id: int, fields: dict) -> Optional[StudyGroup]:
        _update("study_groups", group_id, fields, StudyGroupStoreDB.COLUMNS)
        return StudyGroupStoreDB.get(group_id)

    @staticmethod
    def delete(group_id: int) -> bool:
        with transaction() as db:
            db.execute("DELETE FROM study_group_members WHERE group_id=?", (group_id,))
            cur = db.execute("DELETE FROM study_groups WHERE id=?", (group_id,))
        return cur.rowcount > 0

    @staticmethod
    def members(group_id: int) -> list[StudyGroupMember]:
        """Current members with their usernames, oldest membership first."""
        rows = get_db().execute(
            "SELECT m.*, u.username FROM study_group_members m "
            "JOIN users u ON m.user_id = u.id "
            "WHERE m.group_id=? AND m.status IN ('active', 'admin') "
            "ORDER BY m.joined_at, m.user_id",
            (group_id,),
        ).fetchall()
        return [StudyGroupMember.from_row(r) for r in rows]

    @staticmethod
    def member_ids(group_id: int) -> list[int]:
        return [m.user_id for m in StudyGroupStoreDB.members(group_id)]

    @staticmethod
    def membership(group_id: int, user_id: int) -> Optional[StudyGroupMember]:
        row = get_db().execute(
            "SELECT * FROM study_group_members WHERE group_id=? AND user_id=?",
            (group_id, user_id),
        ).fetchone()
        return StudyGroupMember.from_row(row) if row else None

    @staticmethod
    def join(group_id: int, user_id: int) -> Optional[StudyGroupMember]:
        """Add an active membership. Returns None if the user is already a member."""
        db = get_db()
        try:
            _insert("study_group_members", {
                "group_id": group_id,
                "user_id": user_id,
                "status": "active",
                "joined_at": datetime.now().isoformat(),
            })
            db.commit()
        except db.IntegrityError:
            db.rollback()
            return None
        return StudyGroupStoreDB.membership(group_id, user_id)

    @staticmethod
    def leave(group_id: int, user_id: int) -> bool:
        db = get_db()
        cur = db.execute(
            "DELETE FROM study_group_members WHERE group_id=? AND user_id=?",
            (group_id, user_id),
        )
        db.commit()
        return cur.rowcount > 0
