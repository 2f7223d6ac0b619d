from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.core.constants import SessionStatusEnum, SubmissionTypeEnum


class SessionStart(BaseModel):
    exam_id: int
    browser_info: Optional[str] = None
    ip_address: Optional[str] = None

class SessionSubmit(BaseModel):
    submission_type: SubmissionTypeEnum

class ExamSession(BaseModel):
    id: int
    session_code: str
    student_id: int
    exam_id: int
    start_time: datetime
    scheduled_end_time: datetime
    end_time: Optional[datetime] = None
    actual_duration_seconds: Optional[int] = None
    status: SessionStatusEnum
    submission_type: Optional[SubmissionTypeEnum] = None
    max_violations: int
    min_time_guarantee_minutes: int = 0
    total_violations: int = 0
    completion_percentage: float = 0.0
    score: Optional[float] = None
    was_resumed: bool = False
    resume_count: int = 0
    browser_info: Optional[str] = None
    ip_address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ExistingSessionCheck(BaseModel):
    has_existing_session: bool
    session: Optional[ExamSession] = None

class FinalizeResult(BaseModel):
    session: ExamSession
    computed_score: Optional[float] = Field(None, description="Score stored by the winning finalize call")
    already_finalized: bool = Field(False, description="True when another caller finalized first")
