import logging
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from app.core.constants import ProctoringStatusEnum, ViolationSeverityEnum
from app.core.exceptions import SessionNotFound
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.proctoring_report import proctoring_report as crud_proctoring_report
from app.crud.violation import violation as crud_violation
from app.models.exam_session import ExamSession
from app.models.proctoring_report import ProctoringReport
from app.models.violation import Violation

logger = logging.getLogger(__name__)

SERIOUS_SEVERITIES = {ViolationSeverityEnum.CRITICAL, ViolationSeverityEnum.HIGH}


def classify_session(total_violations: int, violations: Iterable[Violation]) -> ProctoringStatusEnum:
    """Review status an admin sees for a finished session."""
    serious = [
        v for v in violations
        if v.severity in SERIOUS_SEVERITIES or "developer" in v.violation_type.lower()
    ]
    if serious:
        return ProctoringStatusEnum.FLAGGED_FOR_REVIEW
    if total_violations == 0:
        return ProctoringStatusEnum.CLEAN
    if total_violations <= 2:
        return ProctoringStatusEnum.MINOR_ISSUES
    if total_violations <= 5:
        return ProctoringStatusEnum.CONCERNING
    return ProctoringStatusEnum.FLAGGED_FOR_REVIEW


class ProctoringReportService:

    def create_report(self, db: Session, session: ExamSession) -> ProctoringReport:
        """Called inside the winning finalize transaction; the caller commits."""
        violations = crud_violation.get_all_by_session(db, session_id=session.id)
        violation_types = sorted({v.violation_type for v in violations})
        status = classify_session(session.total_violations, violations)

        duration_minutes = None
        if session.actual_duration_seconds is not None:
            duration_minutes = round(session.actual_duration_seconds / 60)

        student = session.student
        exam = session.exam
        report = crud_proctoring_report.create(db, obj_in={
            "session_id": session.id,
            "student_id": session.student_id,
            "exam_id": session.exam_id,
            "student_name": student.full_name if student else None,
            "student_email": student.email if student else None,
            "exam_title": exam.title if exam else None,
            "exam_start": session.start_time,
            "exam_end": session.end_time,
            "duration_minutes": duration_minutes,
            "total_violations": session.total_violations,
            "violation_types": violation_types,
            "status": status,
            "submission_type": session.submission_type,
            "form_submitted": True,
            "score": session.score,
            "completion_percentage": session.completion_percentage,
        })
        logger.info(f"Proctoring report for session {session.id}: {status.value}")
        return report

    def get_report(self, db: Session, session_id: int) -> Optional[ProctoringReport]:
        if not crud_exam_session.get(db, id=session_id):
            raise SessionNotFound(session_id)
        return crud_proctoring_report.get_by_session(db, session_id=session_id)


proctoring_report_service = ProctoringReportService()
