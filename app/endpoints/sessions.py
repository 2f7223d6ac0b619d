from typing import Optional
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.exam_session import ExamSession, ExistingSessionCheck, FinalizeResult, SessionStart, SessionSubmit
from app.schemas.proctoring_report import ProctoringReport
from app.schemas.recovery import RecoveryPayload
from app.schemas.snapshot import SnapshotAck, SnapshotPayload
from app.schemas.violation import ViolationResult
from app.services.exam_session import exam_session_service
from app.services.proctoring_report import proctoring_report_service
from app.services.recovery import recovery_service
from app.utils import deps

router = APIRouter()


@router.post("/start", response_model=APIResponse[ExamSession], status_code=status.HTTP_201_CREATED)
async def start_session(
    *,
    request: Request,
    db: Session = Depends(deps.get_db),
    session_in: SessionStart,
    student_id: int = Depends(deps.get_current_student_id)
):
    ip_address = session_in.ip_address or (request.client.host if request.client else None)
    session = exam_session_service.start_or_resume_session(
        db,
        student_id=student_id,
        exam_id=session_in.exam_id,
        browser_info=session_in.browser_info,
        ip_address=ip_address,
    )
    return APIResponse(message="Exam session started successfully", data=ExamSession.model_validate(session))


@router.get("/check/{exam_id}", response_model=APIResponse[ExistingSessionCheck])
async def check_existing_session(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    session = exam_session_service.check_existing_session(db, student_id=student_id, exam_id=exam_id)
    data = ExistingSessionCheck(
        has_existing_session=session is not None,
        session=ExamSession.model_validate(session) if session else None,
    )
    message = "Existing session found" if session else "No existing session"
    return APIResponse(message=message, data=data)


@router.get("/code/{session_code}", response_model=APIResponse[ExamSession])
async def get_session_by_code(
    *,
    db: Session = Depends(deps.get_db),
    session_code: str,
    student_id: int = Depends(deps.get_current_student_id)
):
    session = exam_session_service.get_owned_session_by_code(db, session_code=session_code, student_id=student_id)
    return APIResponse(message="Session retrieved successfully", data=ExamSession.model_validate(session))


@router.get("/{session_id}", response_model=APIResponse[ExamSession])
async def get_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    session = exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    return APIResponse(message="Session retrieved successfully", data=ExamSession.model_validate(session))


@router.get("/{session_id}/recovery", response_model=APIResponse[RecoveryPayload])
async def get_recovery_data(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    payload = recovery_service.get_recovery_data(db, session_id=session_id)
    return APIResponse(message="Recovery data retrieved successfully", data=payload)


@router.post("/{session_id}/snapshot", response_model=APIResponse[SnapshotAck])
async def save_snapshot(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    payload: SnapshotPayload,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    snapshot = recovery_service.save_snapshot(db, session_id=session_id, payload=payload)
    return APIResponse(message="Progress snapshot saved successfully", data=SnapshotAck.model_validate(snapshot))


@router.post("/{session_id}/resume", response_model=APIResponse[ViolationResult])
async def resume_session(
    *,
    request: Request,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    result = recovery_service.mark_session_resumed(
        db, session_id=session_id, browser_info=request.headers.get("user-agent")
    )
    return APIResponse(message="Session resumed", data=result)


@router.post("/{session_id}/submit", response_model=APIResponse[FinalizeResult])
async def submit_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    submit_in: SessionSubmit,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    result = exam_session_service.finalize(db, session_id=session_id, cause=submit_in.submission_type)
    message = "Exam was already submitted" if result.already_finalized else "Exam submitted successfully"
    return APIResponse(message=message, data=result)


@router.get("/{session_id}/report", response_model=APIResponse[Optional[ProctoringReport]])
async def get_proctoring_report(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    report = proctoring_report_service.get_report(db, session_id=session_id)
    if report is None:
        return APIResponse(message="Session has not been finalized yet", data=None)
    return APIResponse(message="Proctoring report retrieved successfully", data=ProctoringReport.model_validate(report))
