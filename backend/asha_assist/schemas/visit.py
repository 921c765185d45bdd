from datetime import date, datetime
from typing import Any, Optional

from asha_assist.schemas.base import CamelModel


class StartVisitRequest(CamelModel):
    patient_phone_number: str
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None


class StartVisitResponse(CamelModel):
    # Only the identifier leaves the server; the code goes out by SMS.
    visit_id: int


class VerifyOtpRequest(CamelModel):
    visit_id: int
    otp: str


class PatientSummary(CamelModel):
    phone_number: str
    full_name: str


class WorkerSummary(CamelModel):
    username: str
    full_name: str


class MedicalRecordResponse(CamelModel):
    id: int
    raw_transcript: Optional[str] = None
    structured_data: Optional[Any] = None
    created_at: Optional[datetime] = None


class VisitResponse(CamelModel):
    id: int
    is_verified: bool
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    patient: PatientSummary
    worker: WorkerSummary
    medical_record: Optional[MedicalRecordResponse] = None


class TranscriptionResponse(CamelModel):
    medical_record_id: int
    raw_transcript: str
