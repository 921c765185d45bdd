from typing import Optional

from pydantic import Field

from asha_assist.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    full_name: Optional[str] = None
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    username: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "Bearer"
