from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.exam_response import BulkResponseSave, BulkSaveResult, ExamResponse, ResponseSave
from app.services.exam_response import exam_response_service
from app.services.exam_session import exam_session_service
from app.utils import deps

router = APIRouter()


@router.post("/save", response_model=APIResponse[ExamResponse])
async def save_response(
    *,
    db: Session = Depends(deps.get_db),
    response_in: ResponseSave,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=response_in.session_id, student_id=student_id)
    response = exam_response_service.save_response(
        db,
        session_id=response_in.session_id,
        question_id=response_in.question_id,
        response_text=response_in.response_text,
        response_option_index=response_in.response_option_index,
    )
    return APIResponse(message="Response saved successfully", data=ExamResponse.model_validate(response))


@router.post("/bulk", response_model=APIResponse[BulkSaveResult])
async def bulk_save_responses(
    *,
    db: Session = Depends(deps.get_db),
    bulk_in: BulkResponseSave,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=bulk_in.session_id, student_id=student_id)
    result = exam_response_service.bulk_save_responses(db, session_id=bulk_in.session_id, answers=bulk_in.responses)
    return APIResponse(message=f"{result.saved_count} responses saved successfully", data=result)


@router.get("/session/{session_id}", response_model=APIResponse[List[ExamResponse]])
async def get_session_responses(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    responses = exam_response_service.get_session_responses(db, session_id=session_id)
    return APIResponse(
        message="Session responses retrieved successfully",
        data=[ExamResponse.model_validate(r) for r in responses]
    )
