from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from app.models.exam_session import ExamSession


class TestSessionEndpoints:
    def test_start_session(self, client: TestClient, auth_headers, exam):
        response = client.post(
            "/sessions/start",
            headers=auth_headers,
            json={"exam_id": exam.id, "browser_info": "Mozilla/5.0"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["data"]["status"] == "in_progress"
        assert body["data"]["exam_id"] == exam.id
        assert body["data"]["browser_info"] == "Mozilla/5.0"
        assert body["data"]["ip_address"]

    def test_start_twice_returns_same_session(self, client: TestClient, auth_headers, exam, db_session: Session):
        first = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]
        second = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]
        assert first["id"] == second["id"]
        assert first["scheduled_end_time"] == second["scheduled_end_time"]
        assert db_session.query(ExamSession).count() == 1

    def test_start_requires_student_header(self, client: TestClient, exam):
        response = client.post("/sessions/start", json={"exam_id": exam.id})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_start_rejects_non_positive_student_id(self, client: TestClient, exam):
        response = client.post("/sessions/start", headers={"X-Student-Id": "0"}, json={"exam_id": exam.id})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_start_unknown_exam(self, client: TestClient, auth_headers):
        response = client.post("/sessions/start", headers=auth_headers, json={"exam_id": 9999})
        assert response.status_code == 404
        body = response.json()
        assert body["error"]["code"] == "EXAM_NOT_FOUND"
        assert body["error"]["details"] == {"exam_id": 9999}
        assert response.headers["X-Request-ID"] == body["request_id"]

    def test_start_exam_without_policy(self, client: TestClient, auth_headers, exam_factory):
        exam = exam_factory(max_violations=None)
        response = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "POLICY_MISSING"

    def test_check_existing_session(self, client: TestClient, auth_headers, exam):
        response = client.get(f"/sessions/check/{exam.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"has_existing_session": False, "session": None}

        started = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]
        data = client.get(f"/sessions/check/{exam.id}", headers=auth_headers).json()["data"]
        assert data["has_existing_session"] is True
        assert data["session"]["id"] == started["id"]

    def test_get_session_of_another_student(self, client: TestClient, auth_headers, exam, student_factory):
        started = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]
        other = student_factory()
        response = client.get(f"/sessions/{started['id']}", headers={"X-Student-Id": str(other.id)})
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"

    def test_get_unknown_session(self, client: TestClient, auth_headers):
        response = client.get("/sessions/5150", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"

    def test_get_session_by_code(self, client: TestClient, auth_headers, exam, student_factory):
        started = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]
        assert started["session_code"]

        response = client.get(f"/sessions/code/{started['session_code']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == started["id"]

        other = student_factory()
        response = client.get(f"/sessions/code/{started['session_code']}", headers={"X-Student-Id": str(other.id)})
        assert response.status_code == 403

        response = client.get("/sessions/code/NOSUCHCODE", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"

    def test_snapshot_and_recovery(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]

        response = client.get(f"/sessions/{session_id}/recovery", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NO_RECOVERY_DATA"

        snapshot = client.post(
            f"/sessions/{session_id}/snapshot",
            headers=auth_headers,
            json={"responses": {"1": 1}, "violations": 0, "completion_percentage": 33.3,
                  "current_question_index": 1, "time_remaining": 3000}
        )
        assert snapshot.status_code == 200
        assert snapshot.json()["data"]["id"]

        recovery = client.get(f"/sessions/{session_id}/recovery", headers=auth_headers)
        assert recovery.status_code == 200
        data = recovery.json()["data"]
        assert data["can_recover"] is True
        assert data["snapshot"]["current_question_index"] == 1
        assert data["session"]["session_code"]
        assert 0 < data["time_remaining_seconds"] <= exam.duration_minutes * 60
        assert data["effective_time_remaining_seconds"] >= data["time_remaining_seconds"]

    def test_snapshot_shape_is_validated(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]
        response = client.post(
            f"/sessions/{session_id}/snapshot",
            headers=auth_headers,
            json={"completion_percentage": 150}
        )
        assert response.status_code == 422

    def test_resume(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]
        response = client.post(f"/sessions/{session_id}/resume", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["total_violations"] == 1

        session = client.get(f"/sessions/{session_id}", headers=auth_headers).json()["data"]
        assert session["was_resumed"] is True
        assert session["resume_count"] == 1

    def test_submit_is_idempotent(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]

        first = client.post(f"/sessions/{session_id}/submit", headers=auth_headers, json={"submission_type": "manual"})
        assert first.status_code == 200
        assert first.json()["data"]["already_finalized"] is False
        assert first.json()["data"]["session"]["status"] == "completed"

        second = client.post(
            f"/sessions/{session_id}/submit", headers=auth_headers, json={"submission_type": "auto_time_expired"}
        )
        assert second.status_code == 200
        assert second.json()["data"]["already_finalized"] is True
        assert second.json()["data"]["session"]["status"] == "completed"
        assert second.json()["data"]["session"]["submission_type"] == "manual"

    def test_submit_rejects_unknown_cause(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]
        response = client.post(f"/sessions/{session_id}/submit", headers=auth_headers, json={"submission_type": "whenever"})
        assert response.status_code == 422

    def test_report(self, client: TestClient, auth_headers, exam):
        session_id = client.post("/sessions/start", headers=auth_headers, json={"exam_id": exam.id}).json()["data"]["id"]
        pending = client.get(f"/sessions/{session_id}/report", headers=auth_headers)
        assert pending.status_code == 200
        assert pending.json()["data"] is None

        client.post(f"/sessions/{session_id}/submit", headers=auth_headers, json={"submission_type": "manual"})
        report = client.get(f"/sessions/{session_id}/report", headers=auth_headers).json()["data"]
        assert report["session_id"] == session_id
        assert report["status"] == "clean"
        assert report["submission_type"] == "manual"
