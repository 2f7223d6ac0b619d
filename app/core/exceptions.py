from typing import Any, Dict, Optional


class ProctorError(Exception):
    """Base class for errors surfaced to the HTTP boundary as typed results."""
    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(ProctorError):
    status_code = 404
    code = "NOT_FOUND"


class SessionNotFound(NotFound):
    code = "SESSION_NOT_FOUND"

    def __init__(self, session_id: Any):
        super().__init__("Session not found", details={"session_id": session_id})


class ExamNotFound(NotFound):
    code = "EXAM_NOT_FOUND"

    def __init__(self, exam_id: Any):
        super().__init__("Exam not found or not active", details={"exam_id": exam_id})


class NoRecoveryData(ProctorError):
    status_code = 404
    code = "NO_RECOVERY_DATA"


class PolicyMissing(ProctorError):
    status_code = 422
    code = "POLICY_MISSING"


class InvalidAnswerShape(ProctorError):
    status_code = 400
    code = "INVALID_ANSWER_SHAPE"


class SessionNotActive(ProctorError):
    status_code = 409
    code = "SESSION_NOT_ACTIVE"


class SessionAccessDenied(ProctorError):
    status_code = 403
    code = "ACCESS_DENIED"

    def __init__(self, session_id: Any):
        super().__init__("Access denied to this session", details={"session_id": session_id})
