from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from asha_assist.exceptions import VerificationFailed
from asha_assist.schemas.visit import (
    StartVisitRequest,
    StartVisitResponse,
    TranscriptionResponse,
    VerifyOtpRequest,
    VisitResponse,
)
from asha_assist.security.authenticator import get_current_principal
from asha_assist.security.principal import Principal
from asha_assist.services.transcription_service import TranscriptionClient, get_transcription_client
from asha_assist.services.visit_service import VisitService, get_visit_service

router = APIRouter()


@router.post("/start", response_model=StartVisitResponse)
async def start_visit(
    body: StartVisitRequest,
    visits: VisitService = Depends(get_visit_service),
    current_user: Principal = Depends(get_current_principal),
):
    visit = await visits.start(
        current_user,
        body.patient_phone_number,
        full_name=body.full_name,
        date_of_birth=body.date_of_birth,
        gender=body.gender,
        address=body.address,
    )
    return StartVisitResponse(visit_id=visit.id)


@router.post("/verify")
async def verify_otp(body: VerifyOtpRequest, visits: VisitService = Depends(get_visit_service)):
    if not await visits.verify(body.visit_id, body.otp):
        raise VerificationFailed()
    return {"message": "Visit verified successfully."}


@router.get("/my-recent", response_model=list[VisitResponse])
async def my_recent_visits(
    visits: VisitService = Depends(get_visit_service),
    current_user: Principal = Depends(get_current_principal),
):
    recent = await visits.list_recent_for_worker(current_user)
    return [VisitResponse.model_validate(v) for v in recent]


@router.get("/{visit_id}", response_model=VisitResponse)
async def get_visit(
    visit_id: int,
    visits: VisitService = Depends(get_visit_service),
    current_user: Principal = Depends(get_current_principal),
):
    visit = await visits.get_visit(visit_id, current_user)
    return VisitResponse.model_validate(visit)


@router.post("/{visit_id}/transcribe", response_model=TranscriptionResponse)
async def transcribe_visit_audio(
    visit_id: int,
    audio_file: UploadFile = File(..., alias="audioFile"),
    visits: VisitService = Depends(get_visit_service),
    transcriber: TranscriptionClient = Depends(get_transcription_client),
    current_user: Principal = Depends(get_current_principal),
):
    visit = await visits.get_visit(visit_id, current_user)

    content = await audio_file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Please upload an audio file.")

    raw_transcript = await transcriber.transcribe(
        audio_file.filename or "audio",
        content,
        audio_file.content_type or "application/octet-stream",
    )
    transcript_text = transcriber.extract_text(raw_transcript)
    record = await visits.record_transcript(visit, raw_transcript)
    await transcriber.index(visit.id, transcript_text)

    return TranscriptionResponse(medical_record_id=record.id, raw_transcript=raw_transcript)
