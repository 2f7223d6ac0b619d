from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.session_snapshot import SessionSnapshot
from app.schemas.snapshot import SnapshotPayload

class CRUDSessionSnapshot(CRUDBase[SessionSnapshot, SnapshotPayload, SnapshotPayload]):

    def get_latest(self, db: Session, session_id: int) -> Optional[SessionSnapshot]:
        # id breaks created_at ties between saves landing in the same instant
        return (
            db.query(SessionSnapshot)
            .filter(SessionSnapshot.session_id == session_id)
            .order_by(SessionSnapshot.created_at.desc(), SessionSnapshot.id.desc())
            .first()
        )


session_snapshot = CRUDSessionSnapshot(SessionSnapshot)
