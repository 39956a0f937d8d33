"""
Account audit trail for ProTimer.

Sign-ups, logins, lockouts, logouts and guest sessions are recorded in the
audit_log table and echoed as one ``audit:`` log line each. Extra context is
passed as keyword fields and stored as ``key=value`` pairs in ``detail``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from flask import has_request_context, request

from database import get_db

logger = logging.getLogger(__name__)

REGISTER = "register"
LOGIN_SUCCESS = "login_success"
LOGIN_FAILED = "login_failed"
LOGIN_LOCKED = "login_locked"
LOGOUT = "logout"
GUEST_START = "guest_start"
GUEST_END = "guest_end"

USER_AGENT_MAX = 255


def _client() -> tuple[str, str]:
    """Remote address and (capped) user agent of the current request."""
    if not has_request_context():
        return "", ""
    return request.remote_addr or "", request.headers.get("User-Agent", "")[:USER_AGENT_MAX]


def format_detail(fields: dict) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)


def log_event(action: str, user_id: int | None = None, **fields) -> None:
    """Record ``action`` for ``user_id``; a failed write is logged, never raised."""
    ip, user_agent = _client()
    detail = format_detail(fields)

    try:
        db = get_db()
        db.execute(
            "INSERT INTO audit_log (user_id, action, detail, ip_address, user_agent, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (user_id, action, detail, ip, user_agent, datetime.now().isoformat()),
        )
        db.commit()
    except sqlite3.Error:
        logger.exception("Could not write audit event %s", action)

    logger.info("audit: %s user_id=%s %s", action, user_id, detail)
