"""SMS delivery through the Twilio Messages REST API."""

from functools import lru_cache
from typing import Protocol

import httpx
import structlog

from asha_assist.config import get_settings
from asha_assist.exceptions import DeliveryFailed

logger = structlog.get_logger(__name__)


class SmsSender(Protocol):
    async def send(self, destination: str, message: str) -> None: ...


class TwilioSmsClient:
    """Raises DeliveryFailed for transport errors, timeouts and provider rejections."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str, api_url: str, timeout: float = 10.0):
        if not (account_sid and auth_token and from_number):
            raise ValueError("Twilio credentials are required")
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    async def send(self, destination: str, message: str) -> None:
        url = f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    auth=(self.account_sid, self.auth_token),
                    data={"To": destination, "From": self.from_number, "Body": message},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("sms_rejected", status_code=e.response.status_code, body=e.response.text[:200])
            raise DeliveryFailed(
                "Failed to send OTP SMS. Please check phone number and Twilio configuration."
            ) from e
        except httpx.HTTPError as e:
            logger.warning("sms_transport_error", error=str(e))
            raise DeliveryFailed(
                "Failed to send OTP SMS. Please check phone number and Twilio configuration."
            ) from e
        logger.info("sms_sent", status_code=response.status_code)


@lru_cache()
def get_sms_client() -> SmsSender:
    settings = get_settings()
    return TwilioSmsClient(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_phone_number,
        api_url=settings.twilio_api_url,
        timeout=settings.sms_timeout_seconds,
    )
