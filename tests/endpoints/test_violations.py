import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from app.models.violation import Violation
from app.utils.throttle import violation_throttle


@pytest.fixture
def session_id(client: TestClient, auth_headers, exam):
    return client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]


class TestViolationEndpoints:
    def test_log_violation(self, client: TestClient, auth_headers, session_id):
        response = client.post(
            "/violations/log",
            headers=auth_headers,
            json={"session_id": session_id, "violation_type": "tab_switch", "description": "Left the tab"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_violations"] == 1
        assert data["should_terminate"] is False
        assert data["suppressed"] is False
        assert data["violation_id"]

    def test_log_violation_unknown_session(self, client: TestClient, auth_headers):
        response = client.post("/violations/log", headers=auth_headers, json={"session_id": 8080, "violation_type": "tab_switch"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"

    def test_list_and_stats(self, client: TestClient, auth_headers, session_id):
        for violation_type in ("tab_switch", "right_click", "tab_switch"):
            client.post("/violations/log", headers=auth_headers,
                        json={"session_id": session_id, "violation_type": violation_type})

        listed = client.get(f"/violations/session/{session_id}", headers=auth_headers).json()["data"]
        assert listed["count"] == 3
        assert [v["violation_type"] for v in listed["violations"]] == ["tab_switch", "right_click", "tab_switch"]

        stats = client.get(f"/violations/stats/{session_id}", headers=auth_headers).json()["data"]
        assert stats["total"] == 3
        assert stats["by_type"] == {"tab_switch": 2, "right_click": 1}
        assert stats["by_severity"]["medium"] == 2
        assert stats["by_severity"]["high"] == 1

    def test_repeats_inside_window_are_suppressed(self, client: TestClient, auth_headers, session_id,
                                                  db_session: Session):
        violation_throttle.window_seconds = 30
        payload = {"session_id": session_id, "violation_type": "window_blur"}

        first = client.post("/violations/log", headers=auth_headers, json=payload).json()["data"]
        second = client.post("/violations/log", headers=auth_headers, json=payload).json()["data"]
        other = client.post("/violations/log", headers=auth_headers,
                            json={"session_id": session_id, "violation_type": "tab_switch"}).json()["data"]

        assert first["suppressed"] is False
        assert second["suppressed"] is True
        assert second["total_violations"] == 1
        assert other["total_violations"] == 2
        assert db_session.query(Violation).filter(Violation.session_id == session_id).count() == 2
