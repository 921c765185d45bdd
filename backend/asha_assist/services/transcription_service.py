"""Forwards visit audio to the speech service and triggers AI indexing."""

import json
from functools import lru_cache

import httpx
import structlog

from asha_assist.config import get_settings
from asha_assist.exceptions import TranscriptionFailed

logger = structlog.get_logger(__name__)


class TranscriptionClient:
    def __init__(self, whisper_api_url: str, ai_service_url: str, timeout: float = 120.0):
        self.whisper_api_url = whisper_api_url
        self.ai_service_url = ai_service_url.rstrip("/")
        self.timeout = timeout

    async def transcribe(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Return the raw response body of the speech service."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.whisper_api_url,
                    files={"file": (filename, content, content_type)},
                )
                response.raise_for_status()
                return response.text
        except httpx.HTTPError as e:
            logger.warning("transcription_failed", error=str(e))
            raise TranscriptionFailed(f"Speech service returned an error: {e}") from e

    @staticmethod
    def extract_text(raw_transcript: str) -> str:
        try:
            return json.loads(raw_transcript)["transcription"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("transcription_unparseable", preview=raw_transcript[:200])
            raise TranscriptionFailed("Failed to parse speech service response.") from e

    async def index(self, visit_id: int, transcript: str) -> bool:
        """Best effort; failures are logged and reported as False."""
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(
                    f"{self.ai_service_url}/index",
                    json={"visitId": visit_id, "transcript": transcript},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("indexing_failed", visit_id=visit_id, error=str(e))
            return False
        logger.info("indexing_triggered", visit_id=visit_id)
        return True


@lru_cache()
def get_transcription_client() -> TranscriptionClient:
    settings = get_settings()
    return TranscriptionClient(
        whisper_api_url=settings.whisper_api_url,
        ai_service_url=settings.ai_service_url,
        timeout=settings.transcription_timeout_seconds,
    )
