import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import ViolationSeverityEnum, ViolationTypeEnum
from app.core.exceptions import NoRecoveryData, SessionNotActive
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.session_snapshot import session_snapshot as crud_session_snapshot
from app.models.session_snapshot import SessionSnapshot
from app.schemas.exam_session import ExamSession as ExamSessionSchema
from app.schemas.recovery import RecoveryPayload
from app.schemas.snapshot import SessionSnapshot as SessionSnapshotSchema, SnapshotPayload
from app.schemas.violation import ViolationResult
from app.services.exam_session import exam_session_service
from app.services.violation import violation_service
from app.utils.clock import as_utc, effective_remaining, elapsed, remaining, utcnow

logger = logging.getLogger(__name__)


class RecoveryService:
    """Snapshots are a best-effort mirror of the client. Timing always comes from the
    session's stored deadline, never from what a snapshot says was left."""

    def save_snapshot(
        self,
        db: Session,
        session_id: int,
        payload: SnapshotPayload,
        now: Optional[datetime] = None,
    ) -> SessionSnapshot:
        exam_session_service.get_session(db, session_id)

        snapshot = crud_session_snapshot.create(db, obj_in={
            "session_id": session_id,
            "snapshot_data": payload.model_dump(mode="json"),
            "responses_count": len(payload.responses),
            "violations_count": payload.violations,
            "completion_percentage": payload.completion_percentage,
            "current_question_index": payload.current_question_index,
            "time_remaining_seconds": payload.time_remaining,
            "created_at": as_utc(now or utcnow()),
        })
        db.commit()
        db.refresh(snapshot)

        logger.info(
            f"Snapshot {snapshot.id} saved for session {session_id}: "
            f"{snapshot.responses_count} responses, {snapshot.violations_count} violations"
        )
        return snapshot

    def get_recovery_data(
        self,
        db: Session,
        session_id: int,
        now: Optional[datetime] = None,
    ) -> RecoveryPayload:
        session = exam_session_service.get_session(db, session_id)
        if session.is_terminal:
            raise NoRecoveryData(
                "Session is already finalized",
                details={"session_id": session_id, "status": session.status.value},
            )

        snapshot = crud_session_snapshot.get_latest(db, session_id=session_id)
        if not snapshot:
            raise NoRecoveryData("No recovery data found", details={"session_id": session_id})

        now = as_utc(now or utcnow())
        time_elapsed = elapsed(now, session.start_time)
        time_remaining = remaining(now, session.scheduled_end_time)
        floor_minutes = session.min_time_guarantee_minutes
        effective = effective_remaining(time_remaining, floor_minutes)

        return RecoveryPayload(
            session=ExamSessionSchema.model_validate(session),
            snapshot=SessionSnapshotSchema.model_validate(snapshot),
            time_elapsed_seconds=int(time_elapsed.total_seconds()),
            time_remaining_seconds=int(time_remaining.total_seconds()),
            min_time_guarantee_seconds=(floor_minutes or 0) * 60,
            effective_time_remaining_seconds=int(effective.total_seconds()),
            recovery_timestamp=now,
        )

    def mark_session_resumed(
        self,
        db: Session,
        session_id: int,
        browser_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ViolationResult:
        """Audit a client resuming after an interruption. Status does not change."""
        session = exam_session_service.get_session(db, session_id)
        if not crud_exam_session.mark_resumed(db, id=session_id):
            db.rollback()
            raise SessionNotActive(
                "Only an in-progress session can be resumed.",
                details={"session_id": session_id, "status": session.status.value},
            )

        result = violation_service.append(
            db,
            session_id,
            ViolationTypeEnum.EXAM_RESUMED,
            severity=ViolationSeverityEnum.LOW,
            description="Student recovered and resumed exam",
            browser_info=browser_info,
            now=now,
        )
        db.commit()
        logger.info(f"Session {session_id} resumed ({result.total_violations} ledger entries)")
        return result


recovery_service = RecoveryService()
