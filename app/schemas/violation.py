from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.core.constants import ViolationSeverityEnum


class ViolationLog(BaseModel):
    session_id: int
    violation_type: str = Field(..., min_length=1)
    severity: Optional[ViolationSeverityEnum] = None
    description: Optional[str] = None
    browser_info: Optional[str] = None
    device_info: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None

class ViolationResult(BaseModel):
    violation_id: Optional[int] = None
    detected_at: Optional[datetime] = None
    total_violations: int
    max_violations: int
    should_terminate: bool
    suppressed: bool = False

class Violation(BaseModel):
    id: int
    session_id: int
    violation_type: str
    severity: ViolationSeverityEnum
    description: Optional[str] = None
    browser_info: Optional[str] = None
    device_info: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None
    detected_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SessionViolations(BaseModel):
    violations: List[Violation]
    count: int

class ViolationStats(BaseModel):
    total: int
    by_severity: Dict[str, int]
    by_type: Dict[str, int]
