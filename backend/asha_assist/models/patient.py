from sqlalchemy import Column, Date, DateTime, Integer, String, Text

from asha_assist.database import Base
from asha_assist.time_utils import utc_now


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    date_of_birth = Column(Date)
    gender = Column(String(20))
    address = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utc_now)
