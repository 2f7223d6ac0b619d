from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.violation import SessionViolations, Violation, ViolationLog, ViolationResult, ViolationStats
from app.services.exam_session import exam_session_service
from app.services.violation import violation_service
from app.utils import deps
from app.utils.throttle import violation_throttle

router = APIRouter()


@router.post("/log", response_model=APIResponse[ViolationResult])
async def log_violation(
    *,
    db: Session = Depends(deps.get_db),
    violation_in: ViolationLog,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=violation_in.session_id, student_id=student_id)

    if not await violation_throttle.allow(violation_in.session_id, violation_in.violation_type):
        result = violation_service.get_violation_status(db, session_id=violation_in.session_id)
        return APIResponse(message="Duplicate violation suppressed", data=result)

    result = violation_service.log_violation(
        db,
        session_id=violation_in.session_id,
        violation_type=violation_in.violation_type,
        severity=violation_in.severity,
        description=violation_in.description,
        browser_info=violation_in.browser_info,
        device_info=violation_in.device_info,
        additional_data=violation_in.additional_data,
    )
    return APIResponse(message="Violation logged successfully", data=result)


@router.get("/session/{session_id}", response_model=APIResponse[SessionViolations])
async def get_session_violations(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    violations = violation_service.get_session_violations(db, session_id=session_id)
    data = SessionViolations(
        violations=[Violation.model_validate(v) for v in violations],
        count=len(violations),
    )
    return APIResponse(message="Session violations retrieved successfully", data=data)


@router.get("/stats/{session_id}", response_model=APIResponse[ViolationStats])
async def get_violation_stats(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    student_id: int = Depends(deps.get_current_student_id)
):
    exam_session_service.get_owned_session(db, session_id=session_id, student_id=student_id)
    stats = violation_service.get_violation_stats(db, session_id=session_id)
    return APIResponse(message="Violation statistics retrieved successfully", data=stats)
