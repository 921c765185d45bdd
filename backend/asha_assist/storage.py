"""
Storage collaborator used by the visit and account services.

Finds return None for absence; saves return the persisted entity with its
identifier assigned.
"""

from typing import Optional, Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from asha_assist.database import get_db
from asha_assist.models import MedicalRecord, Patient, User, Visit


class Storage(Protocol):
    async def find_user_by_username(self, username: str) -> Optional[User]: ...

    async def save_user(self, user: User) -> User: ...

    async def find_patient_by_phone(self, phone_number: str) -> Optional[Patient]: ...

    async def save_patient(self, patient: Patient) -> Patient: ...

    async def find_visit_by_id(self, visit_id: int) -> Optional[Visit]: ...

    async def save_visit(self, visit: Visit) -> Visit: ...

    async def list_recent_visits_for_worker(self, username: str, limit: int) -> list[Visit]: ...

    async def find_medical_record_for_visit(self, visit_id: int) -> Optional[MedicalRecord]: ...

    async def save_medical_record(self, record: MedicalRecord) -> MedicalRecord: ...


def _visit_query():
    return select(Visit).options(
        selectinload(Visit.patient),
        selectinload(Visit.worker),
        selectinload(Visit.medical_record),
    )


class SqlStorage:
    """Storage backed by an async SQLAlchemy session (one per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, entity):
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def find_user_by_username(self, username: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.username == username))

    async def save_user(self, user: User) -> User:
        return await self._save(user)

    async def find_patient_by_phone(self, phone_number: str) -> Optional[Patient]:
        return await self.db.scalar(select(Patient).where(Patient.phone_number == phone_number))

    async def save_patient(self, patient: Patient) -> Patient:
        return await self._save(patient)

    async def find_visit_by_id(self, visit_id: int) -> Optional[Visit]:
        return await self.db.scalar(_visit_query().where(Visit.id == visit_id))

    async def save_visit(self, visit: Visit) -> Visit:
        return await self._save(visit)

    async def list_recent_visits_for_worker(self, username: str, limit: int) -> list[Visit]:
        result = await self.db.execute(
            _visit_query()
            .where(Visit.owner_username == username)
            .order_by(Visit.created_at.desc(), Visit.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def find_medical_record_for_visit(self, visit_id: int) -> Optional[MedicalRecord]:
        return await self.db.scalar(select(MedicalRecord).where(MedicalRecord.visit_id == visit_id))

    async def save_medical_record(self, record: MedicalRecord) -> MedicalRecord:
        return await self._save(record)


async def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    return SqlStorage(db)
