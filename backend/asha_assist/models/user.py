from sqlalchemy import Column, DateTime, Integer, String

from asha_assist.database import Base
from asha_assist.time_utils import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # "ASHA_KARMI" | "ADMIN"
    created_at = Column(DateTime(timezone=True), default=utc_now)
