"""Tests for Pomodoro study session routes."""

from datetime import datetime, timedelta

import pytest

from database import get_db


@pytest.fixture
def session(auth_client):
    resp = auth_client.post("/api/study-sessions", json={"subject": "Chemistry", "taskName": "Titration"})
    assert resp.status_code == 201
    return resp.get_json()


class TestStartSession:
    def test_defaults(self, session):
        assert session["isActive"] is True
        assert session["duration"] == 0
        assert session["focusDuration"] == 1500
        assert session["breakDuration"] == 300
        assert session["endTime"] is None
        assert session["startTime"]

    def test_custom_durations(self, auth_client):
        body = auth_client.post("/api/study-sessions", json={
            "subject": "Physics", "focusDuration": 3000, "breakDuration": 600,
        }).get_json()
        assert body["focusDuration"] == 3000
        assert body["breakDuration"] == 600

    def test_config_defaults(self, app, auth_client):
        app.config["DEFAULT_FOCUS_SECONDS"] = 2700
        body = auth_client.post("/api/study-sessions", json={"subject": "Physics"}).get_json()
        assert body["focusDuration"] == 2700

    def test_new_session_deactivates_previous(self, app, auth_client, session):
        second = auth_client.post("/api/study-sessions", json={"subject": "Physics"}).get_json()
        first = auth_client.get(f"/api/study-sessions/{session['id']}").get_json()
        assert first["isActive"] is False
        assert second["isActive"] is True

        with app.app_context():
            active = get_db().execute(
                "SELECT COUNT(*) FROM study_sessions WHERE user_id=1 AND is_active=1"
            ).fetchone()[0]
        assert active == 1

    def test_missing_subject(self, auth_client):
        resp = auth_client.post("/api/study-sessions", json={"taskName": "x"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid study session data"


class TestActiveSession:
    def test_active(self, auth_client, session):
        resp = auth_client.get("/api/study-sessions/active")
        assert resp.status_code == 200
        assert resp.get_json()["id"] == session["id"]

    def test_none_active(self, auth_client):
        resp = auth_client.get("/api/study-sessions/active")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "No active study session found"

    def test_other_users_session_not_returned(self, other_client, session):
        assert other_client.get("/api/study-sessions/active").status_code == 404


class TestStopSession:
    def test_stop(self, app, auth_client, session):
        started = (datetime.now() - timedelta(minutes=25)).isoformat()
        with app.app_context():
            db = get_db()
            db.execute("UPDATE study_sessions SET start_time=? WHERE id=?", (started, session["id"]))
            db.commit()

        resp = auth_client.post(f"/api/study-sessions/{session['id']}/stop")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["isActive"] is False
        assert body["endTime"] is not None
        assert 1500 <= body["duration"] <= 1510
        assert auth_client.get("/api/study-sessions/active").status_code == 404

    def test_stop_twice_unchanged(self, auth_client, session):
        first = auth_client.post(f"/api/study-sessions/{session['id']}/stop").get_json()
        second = auth_client.post(f"/api/study-sessions/{session['id']}/stop").get_json()
        assert first == second

    def test_other_user_cannot_stop(self, other_client, session):
        assert other_client.post(f"/api/study-sessions/{session['id']}/stop").status_code == 403


class TestSessionCrud:
    def test_list(self, auth_client, session):
        sessions = auth_client.get("/api/study-sessions").get_json()
        assert [s["id"] for s in sessions] == [session["id"]]

    def test_update_cannot_reactivate(self, auth_client, session):
        auth_client.post(f"/api/study-sessions/{session['id']}/stop")
        resp = auth_client.put(f"/api/study-sessions/{session['id']}", json={
            "isActive": True, "subject": "Organic chemistry",
        })
        body = resp.get_json()
        assert body["subject"] == "Organic chemistry"
        assert body["isActive"] is False

    def test_delete(self, auth_client, session):
        assert auth_client.delete(f"/api/study-sessions/{session['id']}").status_code == 204
        assert auth_client.get(f"/api/study-sessions/{session['id']}").status_code == 404

    def test_other_user_forbidden(self, other_client, session):
        resp = other_client.get(f"/api/study-sessions/{session['id']}")
        assert resp.status_code == 403
        assert other_client.delete(f"/api/study-sessions/{session['id']}").status_code == 403

    def test_stats_by_subject(self, auth_client, session):
        auth_client.put(f"/api/study-sessions/{session['id']}", json={"duration": 600})
        auth_client.post("/api/study-sessions", json={"subject": "Physics"})
        stats = auth_client.get("/api/study-sessions/stats").get_json()
        assert {"subject": "Chemistry", "duration": 600} in stats
        assert {"subject": "Physics", "duration": 0} in stats
