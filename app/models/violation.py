from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.constants import ViolationSeverityEnum
from app.utils.clock import utcnow

class Violation(Base):
    __tablename__ = "violations"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    violation_type = Column(String, nullable=False)
    severity = Column(
        Enum(ViolationSeverityEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ViolationSeverityEnum.LOW,
    )
    description = Column(Text, nullable=True)
    browser_info = Column(String, nullable=True)
    device_info = Column(String, nullable=True)
    additional_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    detected_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    session = relationship("ExamSession", back_populates="violations")

    def __repr__(self):
        return f"<Violation {self.violation_type} for session {self.session_id}>"
