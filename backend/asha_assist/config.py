import base64
import binascii
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = Field(...)

    # Session tokens
    jwt_secret: str = Field(..., description="Base64 encoded HMAC signing key")
    jwt_expiration_days: int = Field(default=7, ge=1)

    # Visit verification
    otp_ttl_minutes: int = Field(default=5, ge=1)
    recent_visits_limit: int = Field(default=5, ge=1)

    # Twilio SMS
    twilio_account_sid: str = Field(...)
    twilio_auth_token: str = Field(...)
    twilio_phone_number: str = Field(...)
    twilio_api_url: str = Field(default="https://api.twilio.com/2010-04-01")
    sms_timeout_seconds: float = Field(default=10.0)

    # Speech + indexing services
    whisper_api_url: str = Field(default="http://whisper:9000/transcribe")
    ai_service_url: str = Field(default="http://ai-service:8001")
    transcription_timeout_seconds: float = Field(default=120.0)

    # HTTP
    cors_allow_origins: list[str] = Field(default=["*"])

    # Logging
    log_level: str = Field(default="INFO")

    # Optional admin seeded at startup
    bootstrap_admin_username: Optional[str] = Field(default=None)
    bootstrap_admin_password: Optional[str] = Field(default=None)

    @field_validator("jwt_secret")
    @classmethod
    def _check_jwt_secret(cls, value: str) -> str:
        try:
            key = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("JWT_SECRET must be valid base64") from exc
        if len(key) < 32:
            raise ValueError("JWT_SECRET must decode to at least 256 bits")
        return value

    @field_validator("twilio_account_sid", "twilio_auth_token", "twilio_phone_number")
    @classmethod
    def _require_sms_credentials(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("SMS provider credentials must not be blank")
        return value.strip()

    @property
    def jwt_signing_key(self) -> bytes:
        return base64.b64decode(self.jwt_secret)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
