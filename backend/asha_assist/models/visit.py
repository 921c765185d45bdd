from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from asha_assist.database import Base
from asha_assist.time_utils import utc_now


class Visit(Base):
    """A field visit; becomes eligible for clinical processing once verified."""

    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True)
    owner_username = Column(String(100), ForeignKey("users.username"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    otp_code = Column(String(6), nullable=False)
    otp_expires_at = Column(DateTime(timezone=True), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)

    worker = relationship("User")
    patient = relationship("Patient")
    medical_record = relationship("MedicalRecord", uselist=False, back_populates="visit")
