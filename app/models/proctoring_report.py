from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Boolean, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ProctoringStatusEnum, SubmissionTypeEnum

class ProctoringReport(Base):
    __tablename__ = "proctoring_reports"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id", ondelete="CASCADE"), nullable=False, unique=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    student_name = Column(String, nullable=True)
    student_email = Column(String, nullable=True)
    exam_title = Column(String, nullable=True)
    exam_start = Column(DateTime(timezone=True), nullable=True)
    exam_end = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    total_violations = Column(Integer, nullable=False, default=0)
    violation_types = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(ProctoringStatusEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    submission_type = Column(
        Enum(SubmissionTypeEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    form_submitted = Column(Boolean, nullable=False, default=True)
    score = Column(Float, nullable=True)
    completion_percentage = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("ExamSession", back_populates="report")
