from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

from app.core.constants import ProctoringStatusEnum, SubmissionTypeEnum


class ProctoringReport(BaseModel):
    id: int
    session_id: int
    student_id: int
    exam_id: int
    exam_title: Optional[str] = None
    exam_start: Optional[datetime] = None
    exam_end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    total_violations: int
    violation_types: List[str] = []
    status: ProctoringStatusEnum
    submission_type: Optional[SubmissionTypeEnum] = None
    score: Optional[float] = None
    completion_percentage: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
