from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.utils.clock import utcnow

class ExamResponse(Base):
    __tablename__ = "responses"
    __table_args__ = (UniqueConstraint("session_id", "question_id", name="uq_responses_session_question"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    response_text = Column(String, nullable=True)
    response_option_index = Column(Integer, nullable=True)
    is_correct = Column(Boolean, nullable=True) # graded once, at write time
    answered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    revision_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    session = relationship("ExamSession", back_populates="responses")
    question = relationship("Question", back_populates="responses")
