from fastapi import APIRouter, Depends

from asha_assist.storage import Storage, get_storage

router = APIRouter()


@router.get("/exists/{phone_number}")
async def patient_exists(phone_number: str, storage: Storage = Depends(get_storage)) -> bool:
    return await storage.find_patient_by_phone(phone_number) is not None
