"""
Seed Demo Data: standalone script and test helper.

Creates the ``testuser`` / ``password123`` account plus two demo classmates,
with tasks, habits, a flashcard deck, a meeting, finished study sessions and
a shared public study group so the leaderboard has something to rank.

Usage:
    python seed_demo_data.py           # Seed into the configured database
    python seed_demo_data.py --reset   # Clear demo users (and their data) first
"""

from __future__ import annotations

import sys
from datetime import date, datetime, timedelta

from werkzeug.security import generate_password_hash

from db_stores import (
    FlashcardDeckStoreDB,
    FlashcardStoreDB,
    HabitStoreDB,
    MeetingStoreDB,
    StudyGroupStoreDB,
    StudySessionStoreDB,
    TaskStoreDB,
    UserStoreDB,
)

TEST_USER = {"username": "testuser", "password": "password123", "email": "test@example.com"}

DEMO_CLASSMATES = [
    {"username": "alice_demo", "password": "demo123", "email": "alice@demo.protimer"},
    {"username": "bob_demo", "password": "demo123", "email": "bob@demo.protimer"},
]

# (subject, minutes) of finished sessions per demo account, in account order
DEMO_SESSIONS = [
    [("Mathematics", 50), ("Biology", 25)],
    [("Mathematics", 25), ("Mathematics", 25), ("Chemistry", 45)],
    [],
]


def clear_demo(db) -> None:
    """Delete the demo accounts; owned rows go with them through ON DELETE CASCADE."""
    names = [TEST_USER["username"]] + [c["username"] for c in DEMO_CLASSMATES]
    placeholders = ",".join("?" * len(names))
    db.execute(f"DELETE FROM users WHERE username IN ({placeholders})", names)
    db.commit()


def _seed_personal_data(uid: int, today: date) -> None:
    TaskStoreDB.create(uid, {
        "name": "Revise calculus notes", "date": today.isoformat(),
        "start_time": "09:00", "end_time": "10:30", "priority": "high",
    })
    TaskStoreDB.create(uid, {
        "name": "Team sync", "date": today.isoformat(),
        "start_time": "14:00", "end_time": "14:30", "priority": "medium",
    })
    HabitStoreDB.create(uid, {
        "name": "Read 20 pages", "target": 5, "streak": 2,
        "completed_days": [(today - timedelta(days=d)).isoformat() for d in (2, 1)],
    })
    deck = FlashcardDeckStoreDB.create(uid, {
        "name": "Derivatives", "description": "Common derivative rules",
        "due_date": (today + timedelta(days=7)).isoformat(),
    })
    for front, back in [("d/dx sin x", "cos x"), ("d/dx e^x", "e^x"), ("d/dx ln x", "1/x")]:
        FlashcardStoreDB.create(deck.id, {"front": front, "back": back})
    MeetingStoreDB.create(uid, {
        "name": "Project kickoff", "date": today.isoformat(), "time": "16:00", "duration": 30,
        "agenda": "Scope and milestones", "participants": ["Alice", "Bob"],
        "action_items": ["Draft timeline"],
    })


def seed() -> dict:
    """Seed demo data into the current app's database. Returns summary dict."""
    now = datetime.now()
    today = now.date()
    if UserStoreDB.get_by_username(TEST_USER["username"]):
        return {"users": 0, "sessions": 0, "group_id": None}

    user_ids = []
    for account in [TEST_USER, *DEMO_CLASSMATES]:
        user = UserStoreDB.create(
            account["username"], generate_password_hash(account["password"]), account["email"],
        )
        user_ids.append(user.id)
        _seed_personal_data(user.id, today)

    session_count = 0
    for uid, sessions in zip(user_ids, DEMO_SESSIONS):
        start = now - timedelta(days=1)
        for subject, minutes in sessions:
            session = StudySessionStoreDB.create(uid, {"subject": subject}, started_at=start)
            StudySessionStoreDB.stop(session.id, ended_at=start + timedelta(minutes=minutes))
            start += timedelta(minutes=minutes + 5)
            session_count += 1

    group = StudyGroupStoreDB.create(user_ids[0], {
        "name": "Math", "description": "Calculus and algebra study group",
    })
    for uid in user_ids[1:]:
        StudyGroupStoreDB.join(group.id, uid)

    return {"users": len(user_ids), "sessions": session_count, "group_id": group.id}


if __name__ == "__main__":
    from app import create_app
    from database import get_db, init_db, run_migrations

    app = create_app()
    with app.app_context():
        init_db()
        run_migrations()
        if "--reset" in sys.argv:
            clear_demo(get_db())
            print("[Seed] Demo data cleared.")
        result = seed()
        print(f"[Seed] Done: {result}")
