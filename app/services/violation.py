import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from sqlalchemy.orm import Session

from app.core.constants import ViolationSeverityEnum, ViolationTypeEnum
from app.core.exceptions import SessionNotFound
from app.crud.exam_session import exam_session as crud_exam_session
from app.crud.violation import violation as crud_violation
from app.models.violation import Violation
from app.schemas.violation import ViolationResult, ViolationStats
from app.services.exam_session import exam_session_service
from app.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


class ViolationService:
    """Append-only integrity ledger.

    Logging a violation never finalizes a session. It reports ``should_terminate`` and the
    caller decides whether to invoke ``finalize(session_id, 'auto_violations')``. Bursts are
    expected to be throttled before they reach this service.
    """

    def determine_severity(self, violation_type: str) -> ViolationSeverityEnum:
        kind = violation_type.lower().replace("_", " ").replace("-", " ")

        if "developer tools" in kind or "console" in kind or "terminated" in kind:
            return ViolationSeverityEnum.CRITICAL
        if "paste" in kind or "copy" in kind or "right click" in kind or "view source" in kind:
            return ViolationSeverityEnum.HIGH
        if "tab" in kind or "window" in kind or "focus" in kind:
            return ViolationSeverityEnum.MEDIUM
        return ViolationSeverityEnum.LOW

    def is_serious_violation(self, violation_type: str) -> bool:
        return self.determine_severity(violation_type) in (
            ViolationSeverityEnum.CRITICAL,
            ViolationSeverityEnum.HIGH,
        )

    def append(
        self,
        db: Session,
        session_id: int,
        violation_type: Union[ViolationTypeEnum, str],
        severity: Optional[ViolationSeverityEnum] = None,
        description: Optional[str] = None,
        browser_info: Optional[str] = None,
        device_info: Optional[str] = None,
        additional_data: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> ViolationResult:
        """Write the row and bump the counter in the caller's transaction."""
        if isinstance(violation_type, ViolationTypeEnum):
            violation_type = violation_type.value

        session = exam_session_service.get_session(db, session_id)
        severity = severity or self.determine_severity(violation_type)

        violation = crud_violation.create(db, obj_in={
            "session_id": session_id,
            "violation_type": violation_type,
            "severity": severity,
            "description": description or "",
            "browser_info": browser_info,
            "device_info": device_info,
            "additional_data": additional_data or {},
            "detected_at": as_utc(now or utcnow()),
        })

        total = crud_exam_session.increment_violations(db, id=session_id)
        if total is None:
            raise SessionNotFound(session_id)

        should_terminate = total >= session.max_violations
        return ViolationResult(
            violation_id=violation.id,
            detected_at=violation.detected_at,
            total_violations=total,
            max_violations=session.max_violations,
            should_terminate=should_terminate,
        )

    def log_violation(
        self,
        db: Session,
        session_id: int,
        violation_type: Union[ViolationTypeEnum, str],
        severity: Optional[ViolationSeverityEnum] = None,
        description: Optional[str] = None,
        browser_info: Optional[str] = None,
        device_info: Optional[str] = None,
        additional_data: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> ViolationResult:
        result = self.append(
            db,
            session_id,
            violation_type,
            severity=severity,
            description=description,
            browser_info=browser_info,
            device_info=device_info,
            additional_data=additional_data,
            now=now,
        )
        db.commit()

        serious = result.should_terminate or self.is_serious_violation(violation_type)
        log = logger.warning if serious else logger.info
        log(
            f"Violation logged on session {session_id}: {violation_type} "
            f"({result.total_violations}/{result.max_violations}, terminate={result.should_terminate})"
        )
        return result

    def get_violation_status(self, db: Session, session_id: int) -> ViolationResult:
        """Current counter without writing anything; used for throttled duplicates."""
        session = exam_session_service.get_session(db, session_id)
        return ViolationResult(
            total_violations=session.total_violations,
            max_violations=session.max_violations,
            should_terminate=session.total_violations >= session.max_violations,
            suppressed=True,
        )

    def get_session_violations(self, db: Session, session_id: int) -> List[Violation]:
        exam_session_service.get_session(db, session_id)
        return crud_violation.get_all_by_session(db, session_id=session_id)

    def get_violation_stats(self, db: Session, session_id: int) -> ViolationStats:
        exam_session_service.get_session(db, session_id)
        by_severity = {severity.value: 0 for severity in ViolationSeverityEnum}
        by_severity.update(crud_violation.count_by_severity(db, session_id=session_id))
        by_type = crud_violation.count_by_type(db, session_id=session_id)
        return ViolationStats(
            total=sum(by_type.values()),
            by_severity=by_severity,
            by_type=by_type,
        )


violation_service = ViolationService()
