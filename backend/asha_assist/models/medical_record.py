from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from asha_assist.database import Base
from asha_assist.time_utils import utc_now


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    visit_id = Column(Integer, ForeignKey("visits.id"), unique=True, nullable=False)
    raw_transcript = Column(Text)
    structured_data = Column(JSON)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    visit = relationship("Visit", back_populates="medical_record")
