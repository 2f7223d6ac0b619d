from pydantic import BaseModel, ConfigDict
from typing import Optional


class ExamPolicy(BaseModel):
    """Timing and integrity policy read from the exam catalog at session start."""
    exam_id: int
    duration_minutes: int
    max_violations: int
    min_time_guarantee_minutes: int

class ExamSummary(BaseModel):
    id: int
    title: str
    duration_minutes: Optional[int] = None
    max_violations: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
