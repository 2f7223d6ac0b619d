from pydantic import BaseModel
from datetime import datetime

from app.schemas.exam_session import ExamSession
from app.schemas.snapshot import SessionSnapshot


class RecoveryPayload(BaseModel):
    session: ExamSession
    snapshot: SessionSnapshot
    time_elapsed_seconds: int
    time_remaining_seconds: int
    min_time_guarantee_seconds: int
    effective_time_remaining_seconds: int
    recovery_timestamp: datetime
    can_recover: bool = True
