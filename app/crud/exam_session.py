from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from app.core.constants import SessionStatusEnum, SubmissionTypeEnum
from app.crud.base import CRUDBase
from app.models.exam_response import ExamResponse
from app.models.exam_session import ExamSession
from app.models.question import Question
from app.schemas.exam_session import ExamSession as ExamSessionSchema

class CRUDExamSession(CRUDBase[ExamSession, ExamSessionSchema, ExamSessionSchema]):
    """Every mutation of a session row is a single conditional UPDATE; nothing here
    reads a value into Python, changes it and writes it back."""

    def get_fresh(self, db: Session, id: int) -> Optional[ExamSession]:
        # Bypass the identity map so a concurrent winner's committed state is visible
        return (
            db.query(ExamSession)
            .populate_existing()
            .filter(ExamSession.id == id)
            .first()
        )

    def get_by_code(self, db: Session, session_code: str) -> Optional[ExamSession]:
        return (
            db.query(ExamSession)
            .populate_existing()
            .filter(ExamSession.session_code == session_code)
            .first()
        )

    def get_live(self, db: Session, student_id: int, exam_id: int) -> Optional[ExamSession]:
        return (
            db.query(ExamSession)
            .populate_existing()
            .filter(ExamSession.student_id == student_id)
            .filter(ExamSession.exam_id == exam_id)
            .filter(ExamSession.status == SessionStatusEnum.IN_PROGRESS)
            .order_by(ExamSession.start_time.desc())
            .first()
        )

    def claim_terminal(
        self,
        db: Session,
        id: int,
        status: SessionStatusEnum,
        submission_type: SubmissionTypeEnum,
        end_time: datetime,
    ) -> bool:
        """Compare-and-set in_progress -> terminal. True only for the caller that won."""
        rowcount = (
            db.query(ExamSession)
            .filter(ExamSession.id == id)
            .filter(ExamSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(
                {
                    ExamSession.status: status,
                    ExamSession.submission_type: submission_type,
                    ExamSession.end_time: end_time,
                    ExamSession.updated_at: end_time,
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def store_final_figures(
        self,
        db: Session,
        id: int,
        score: float,
        completion_percentage: float,
        actual_duration_seconds: int,
    ) -> None:
        db.query(ExamSession).filter(ExamSession.id == id).update(
            {
                ExamSession.score: score,
                ExamSession.completion_percentage: completion_percentage,
                ExamSession.actual_duration_seconds: actual_duration_seconds,
            },
            synchronize_session=False,
        )

    def increment_violations(self, db: Session, id: int) -> Optional[int]:
        rowcount = (
            db.query(ExamSession)
            .filter(ExamSession.id == id)
            .update(
                {ExamSession.total_violations: ExamSession.total_violations + 1},
                synchronize_session=False,
            )
        )
        if rowcount == 0:
            return None
        # The row stays locked by our UPDATE until commit, so this read is our own write
        return db.query(ExamSession.total_violations).filter(ExamSession.id == id).scalar()

    def refresh_completion(self, db: Session, id: int) -> bool:
        """Recompute completion from stored answers. False once the session has left
        in_progress, so a late save can never rewrite finalized figures."""
        answered = (
            select(func.count(ExamResponse.id))
            .where(ExamResponse.session_id == id)
            .scalar_subquery()
        )
        total = (
            select(func.count(Question.id))
            .where(Question.exam_id == ExamSession.exam_id)
            .scalar_subquery()
        )
        rowcount = (
            db.query(ExamSession)
            .filter(ExamSession.id == id)
            .filter(ExamSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(
                {
                    ExamSession.completion_percentage: case(
                        (total > 0, func.round(answered * 100.0 / total, 2)),
                        else_=0.0,
                    )
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def mark_resumed(self, db: Session, id: int) -> bool:
        rowcount = (
            db.query(ExamSession)
            .filter(ExamSession.id == id)
            .filter(ExamSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(
                {
                    ExamSession.was_resumed: True,
                    ExamSession.resume_count: ExamSession.resume_count + 1,
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def get_overdue_ids(self, db: Session, now: datetime, grace_seconds: int = 0) -> List[int]:
        cutoff = now - timedelta(seconds=grace_seconds)
        rows = (
            db.query(ExamSession.id)
            .filter(ExamSession.status == SessionStatusEnum.IN_PROGRESS)
            .filter(ExamSession.scheduled_end_time <= cutoff)
            .all()
        )
        return [row[0] for row in rows]


exam_session = CRUDExamSession(ExamSession)
