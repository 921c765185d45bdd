from datetime import datetime
from typing import Optional

from asha_assist.schemas.base import CamelModel


class UserResponse(CamelModel):
    """Account view for administrators; never includes the password hash."""
    id: int
    username: str
    full_name: str
    role: str
    created_at: Optional[datetime] = None


class VisitSummary(CamelModel):
    id: int
    owner_username: str
    patient_id: int
    is_verified: bool
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class StatsResponse(CamelModel):
    total_visits: int
    total_patients: int
    total_workers: int
