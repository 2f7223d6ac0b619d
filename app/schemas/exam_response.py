from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class AnswerIn(BaseModel):
    question_id: int
    response_text: Optional[str] = None
    response_option_index: Optional[int] = None

class ResponseSave(AnswerIn):
    session_id: int

class BulkResponseSave(BaseModel):
    session_id: int
    responses: List[AnswerIn] = Field(..., min_length=1)

class BulkSaveResult(BaseModel):
    saved_count: int
    failed_count: int = 0

class ExamResponse(BaseModel):
    id: int
    session_id: int
    question_id: int
    response_text: Optional[str] = None
    response_option_index: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_at: datetime
    revision_count: int

    model_config = ConfigDict(from_attributes=True)
