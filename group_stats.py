"""
Study-group aggregation: who is studying right now, and the group leaderboard.

Both views are read-only and built from the group's current members (status
``active`` or ``admin``). Study time is each member's lifetime total, not
time logged while in the group.
"""

from __future__ import annotations

import logging

from db_stores import StudyGroupStoreDB, StudySessionStoreDB

logger = logging.getLogger(__name__)


class GroupNotFound(LookupError):
    """Raised when an aggregation is requested for a group that does not exist."""

    def __init__(self, group_id: int):
        super().__init__(f"Study group {group_id} not found")
        self.group_id = group_id


def _require_group(group_id: int) -> None:
    if StudyGroupStoreDB.get(group_id) is None:
        raise GroupNotFound(group_id)


def active_sessions(group_id: int) -> list[dict]:
    """Running study sessions of the group's members, each tagged with a username."""
    _require_group(group_id)
    member_ids = StudyGroupStoreDB.member_ids(group_id)
    return StudySessionStoreDB.active_for_users(member_ids)


def leaderboard(group_id: int) -> list[dict]:
    """Members ranked by total study seconds, highest first.

    Members without sessions are listed with 0. Equal totals keep membership
    order (oldest member first).
    """
    _require_group(group_id)
    members = StudyGroupStoreDB.members(group_id)
    totals = StudySessionStoreDB.totals_for_users([m.user_id for m in members])

    entries = [
        {
            "userId": m.user_id,
            "username": m.username,
            "totalDuration": totals.get(m.user_id, 0),
        }
        for m in members
    ]
    entries.sort(key=lambda e: e["totalDuration"], reverse=True)
    for rank, entry in enumerate(entries, 1):
        entry["rank"] = rank
    logger.debug("Leaderboard for group %s: %d members", group_id, len(entries))
    return entries
