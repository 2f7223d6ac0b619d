import secrets
import string
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Boolean, Enum, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import SessionStatusEnum, SubmissionTypeEnum
from app.utils.clock import utcnow

def generate_session_code(length: int = 10) -> str:
    return "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(length))

class ExamSession(Base):
    __tablename__ = "exam_sessions"
    __table_args__ = (
        # At most one live session per (student, exam)
        Index(
            "uq_exam_sessions_live_student_exam",
            "student_id",
            "exam_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_code = Column(String(16), nullable=False, unique=True, index=True, default=generate_session_code)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    scheduled_end_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    actual_duration_seconds = Column(Integer, nullable=True)
    status = Column(
        Enum(SessionStatusEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SessionStatusEnum.IN_PROGRESS,
        index=True,
    )
    submission_type = Column(
        Enum(SubmissionTypeEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    max_violations = Column(Integer, nullable=False)
    min_time_guarantee_minutes = Column(Integer, nullable=False, default=0)
    total_violations = Column(Integer, nullable=False, default=0)
    completion_percentage = Column(Float, nullable=False, default=0.0)
    score = Column(Float, nullable=True)
    was_resumed = Column(Boolean, nullable=False, default=False)
    resume_count = Column(Integer, nullable=False, default=0)
    browser_info = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("Student", back_populates="sessions")
    exam = relationship("Exam", back_populates="sessions")
    responses = relationship("ExamResponse", back_populates="session", cascade="all, delete-orphan")
    violations = relationship("Violation", back_populates="session", cascade="all, delete-orphan",
                              order_by="Violation.detected_at")
    snapshots = relationship("SessionSnapshot", back_populates="session", cascade="all, delete-orphan")
    report = relationship("ProctoringReport", back_populates="session", uselist=False,
                          cascade="all, delete-orphan")

    @property
    def is_terminal(self) -> bool:
        return self.status != SessionStatusEnum.IN_PROGRESS
