from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime


class SnapshotPayload(BaseModel):
    """Last-known-good client view. Only its shape is checked."""
    responses: Dict[str, Any] = Field(default_factory=dict)
    violations: int = Field(0, ge=0)
    completion_percentage: float = Field(0.0, ge=0, le=100)
    current_question_index: Optional[int] = Field(None, ge=0)
    time_remaining: Optional[int] = Field(None, ge=0, description="Client countdown in seconds, advisory")

class SnapshotAck(BaseModel):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SessionSnapshot(BaseModel):
    id: int
    session_id: int
    snapshot_data: Dict[str, Any]
    responses_count: int
    violations_count: int
    completion_percentage: float
    current_question_index: Optional[int] = None
    time_remaining_seconds: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
