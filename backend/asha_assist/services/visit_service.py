"""
Visit verification state machine.

A visit is CREATED with a one-time code that was delivered to the patient by
SMS, and moves to VERIFIED (terminal) when the code is submitted before it
expires. Codes are never regenerated and are not consumed on success: a
correct code keeps verifying until it expires.
"""

import hmac
import secrets
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import structlog
from fastapi import Depends

from asha_assist.config import get_settings
from asha_assist.exceptions import MissingRequiredField, NotFound
from asha_assist.models import MedicalRecord, Patient, Visit
from asha_assist.security.ownership import ensure_can_read_visit
from asha_assist.security.principal import Principal
from asha_assist.services.sms_service import SmsSender, get_sms_client
from asha_assist.storage import Storage, get_storage
from asha_assist.time_utils import ensure_utc, utc_now

logger = structlog.get_logger(__name__)

OTP_MESSAGE = "Your Asha Assist verification code is: {code}"


def generate_otp() -> str:
    """Six digits from the OS CSPRNG, zero padded (000000-999999)."""
    return f"{secrets.randbelow(1_000_000):06d}"


class VisitService:
    def __init__(
        self,
        storage: Storage,
        sms: SmsSender,
        otp_ttl: timedelta = timedelta(minutes=5),
        recent_limit: int = 5,
        clock: Callable[[], datetime] = utc_now,
        otp_generator: Callable[[], str] = generate_otp,
    ):
        self.storage = storage
        self.sms = sms
        self.otp_ttl = otp_ttl
        self.recent_limit = recent_limit
        self.clock = clock
        self.otp_generator = otp_generator

    async def start(
        self,
        worker: Principal,
        patient_phone: str,
        full_name: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        gender: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Visit:
        """
        Open a visit for the patient identified by ``patient_phone``.

        Unknown patients are registered from the supplied fields (a full name
        is mandatory). The code is sent before anything about the visit is
        written; if delivery fails no visit exists.
        """
        patient_phone = (patient_phone or "").strip()
        if not patient_phone:
            raise MissingRequiredField("patientPhoneNumber", "Patient phone number is required.")

        user = await self.storage.find_user_by_username(worker.username)
        if user is None:
            raise NotFound("User not found")

        patient = await self.storage.find_patient_by_phone(patient_phone)
        if patient is None:
            if not full_name or not full_name.strip():
                raise MissingRequiredField("fullName", "Full name is required for a new patient.")
            patient = await self.storage.save_patient(
                Patient(
                    phone_number=patient_phone,
                    full_name=full_name.strip(),
                    date_of_birth=date_of_birth,
                    gender=gender,
                    address=address,
                    created_at=self.clock(),
                )
            )
            logger.info("patient_registered", patient_id=patient.id, worker=worker.username)

        code = self.otp_generator()
        await self.sms.send(patient_phone, OTP_MESSAGE.format(code=code))

        now = self.clock()
        visit = Visit(
            owner_username=user.username,
            patient_id=patient.id,
            otp_code=code,
            otp_expires_at=now + self.otp_ttl,
            is_verified=False,
            verified_at=None,
            created_at=now,
        )
        visit.worker = user
        visit.patient = patient
        visit = await self.storage.save_visit(visit)
        logger.info("visit_started", visit_id=visit.id, worker=worker.username, patient_id=patient.id)
        return visit

    async def verify(self, visit_id: int, submitted_code: str) -> bool:
        """
        True iff the code matches and has not expired. Wrong and expired codes
        are indistinguishable to the caller. Re-verifying an already verified
        visit keeps its original ``verified_at``.
        """
        visit = await self.storage.find_visit_by_id(visit_id)
        if visit is None:
            raise NotFound("Visit not found")

        now = self.clock()
        code_matches = hmac.compare_digest(
            (submitted_code or "").encode("utf-8"), visit.otp_code.encode("utf-8")
        )
        not_expired = now <= ensure_utc(visit.otp_expires_at)
        if not (code_matches and not_expired):
            logger.info("visit_verification_failed", visit_id=visit_id, expired=not not_expired)
            return False

        if not visit.is_verified:
            visit.is_verified = True
            visit.verified_at = now
            await self.storage.save_visit(visit)
            logger.info("visit_verified", visit_id=visit_id)
        else:
            # TODO: decide whether codes should be consumed on first success; replay is allowed until expiry
            logger.info("visit_reverified", visit_id=visit_id)
        return True

    async def list_recent_for_worker(self, worker: Principal) -> list[Visit]:
        return await self.storage.list_recent_visits_for_worker(worker.username, self.recent_limit)

    async def get_visit(self, visit_id: int, principal: Principal) -> Visit:
        visit = await self.storage.find_visit_by_id(visit_id)
        if visit is None:
            raise NotFound("Visit not found")
        ensure_can_read_visit(visit, principal)
        return visit

    async def record_transcript(self, visit: Visit, raw_transcript: str) -> MedicalRecord:
        """Create or replace the medical record attached to ``visit``."""
        record = await self.storage.find_medical_record_for_visit(visit.id)
        if record is None:
            record = MedicalRecord(visit_id=visit.id, created_at=self.clock())
        record.raw_transcript = raw_transcript
        record = await self.storage.save_medical_record(record)
        visit.medical_record = record
        return record


def get_visit_service(
    storage: Storage = Depends(get_storage),
    sms: SmsSender = Depends(get_sms_client),
) -> VisitService:
    settings = get_settings()
    return VisitService(
        storage=storage,
        sms=sms,
        otp_ttl=timedelta(minutes=settings.otp_ttl_minutes),
        recent_limit=settings.recent_visits_limit,
    )
