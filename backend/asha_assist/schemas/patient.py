from datetime import date, datetime
from typing import Optional

from asha_assist.schemas.base import CamelModel


class PatientResponse(CamelModel):
    id: int
    phone_number: str
    full_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
