from sqlalchemy import Column, Integer, DateTime, ForeignKey, Float, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.clock import utcnow

class SessionSnapshot(Base):
    __tablename__ = "session_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    snapshot_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    responses_count = Column(Integer, nullable=False, default=0)
    violations_count = Column(Integer, nullable=False, default=0)
    completion_percentage = Column(Float, nullable=False, default=0.0)
    current_question_index = Column(Integer, nullable=True)
    time_remaining_seconds = Column(Integer, nullable=True) # client-reported, advisory only
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    session = relationship("ExamSession", back_populates="snapshots")
