"""Daily habit tracking: completed-day bookkeeping and streak rules."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from models import Habit


def track_completion(habit: Habit, today: Optional[date] = None) -> bool:
    """Mark ``today`` as done on ``habit``. Returns False if it already was.

    The streak grows when yesterday was also completed (or when there is no
    streak yet) and restarts at 1 after a skipped day.
    """
    today = today or date.today()
    today_iso = today.isoformat()
    if today_iso in habit.completed_days:
        return False

    habit.completed_days = [*habit.completed_days, today_iso]
    yesterday_iso = (today - timedelta(days=1)).isoformat()
    if yesterday_iso in habit.completed_days or habit.streak == 0:
        habit.streak += 1
    else:
        habit.streak = 1
    return True


def weekly_progress(habit: Habit, today: Optional[date] = None) -> dict:
    """Completions in the current Monday-based week against the weekly target."""
    today = today or date.today()
    week_start = today - timedelta(days=today.weekday())
    done = sum(
        1 for d in habit.completed_days
        if week_start.isoformat() <= d <= today.isoformat()
    )
    pct = round(done / habit.target * 100) if habit.target else 0
    return {"completed": done, "target": habit.target, "percent": min(pct, 100)}
