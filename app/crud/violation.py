from typing import Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.violation import Violation
from app.schemas.violation import ViolationLog

class CRUDViolation(CRUDBase[Violation, ViolationLog, ViolationLog]):
    # Append-only: no update or delete helpers on purpose

    def get_all_by_session(self, db: Session, session_id: int) -> List[Violation]:
        return (
            db.query(Violation)
            .filter(Violation.session_id == session_id)
            .order_by(Violation.detected_at.asc(), Violation.id.asc())
            .all()
        )

    def count_by_severity(self, db: Session, session_id: int) -> Dict[str, int]:
        rows = (
            db.query(Violation.severity, func.count(Violation.id))
            .filter(Violation.session_id == session_id)
            .group_by(Violation.severity)
            .all()
        )
        return {severity.value: count for severity, count in rows}

    def count_by_type(self, db: Session, session_id: int) -> Dict[str, int]:
        rows = (
            db.query(Violation.violation_type, func.count(Violation.id))
            .filter(Violation.session_id == session_id)
            .group_by(Violation.violation_type)
            .all()
        )
        return {violation_type: count for violation_type, count in rows}


violation = CRUDViolation(Violation)
