from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from asha_assist.database import get_db
from asha_assist.exceptions import NotFound
from asha_assist.models import Patient, User, Visit
from asha_assist.schemas.admin import StatsResponse, UserResponse, VisitSummary
from asha_assist.schemas.patient import PatientResponse

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    return StatsResponse(
        total_visits=await db.scalar(select(func.count(Visit.id))) or 0,
        total_patients=await db.scalar(select(func.count(Patient.id))) or 0,
        # counts every account, admins included
        total_workers=await db.scalar(select(func.count(User.id))) or 0,
    )


@router.get("/recent-visits", response_model=list[VisitSummary])
async def recent_verified_visits(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Visit)
        .where(Visit.verified_at.is_not(None))
        .order_by(Visit.verified_at.desc())
        .limit(10)
    )
    return [VisitSummary.model_validate(v) for v in result.scalars().all()]


@router.get("/users", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.id))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)


@router.get("/users/{user_id}/visits", response_model=list[VisitSummary])
async def get_user_visits(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    result = await db.execute(
        select(Visit).where(Visit.owner_username == user.username).order_by(Visit.created_at.desc())
    )
    return [VisitSummary.model_validate(v) for v in result.scalars().all()]


@router.get("/patients", response_model=list[PatientResponse])
async def list_patients(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Patient).order_by(Patient.id))
    return [PatientResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/patients/{patient_id}", response_model=PatientResponse)
async def get_patient(patient_id: int, db: AsyncSession = Depends(get_db)):
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFound("Patient not found")
    return PatientResponse.model_validate(patient)


@router.get("/patients/{patient_id}/visits", response_model=list[VisitSummary])
async def get_patient_visits(patient_id: int, db: AsyncSession = Depends(get_db)):
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFound("Patient not found")
    result = await db.execute(
        select(Visit).where(Visit.patient_id == patient_id).order_by(Visit.created_at.desc())
    )
    return [VisitSummary.model_validate(v) for v in result.scalars().all()]
