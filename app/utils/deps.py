from fastapi import Header, HTTPException, status
from app.core.database import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_student_id(x_student_id: int = Header(..., alias="X-Student-Id")) -> int:
    """Student identity as asserted by the upstream authentication layer.

    Credentials are verified before requests reach this service; the gateway forwards the
    verified id in ``X-Student-Id``.
    """
    if x_student_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid student identity",
        )
    return x_student_id
