"""
Request authenticator: turns the raw Authorization header into an AuthResult.

Never raises. A missing header, a non-Bearer scheme and an invalid token all
yield ``ANONYMOUS``; rejection is left to the authorization policy.
"""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import HTTPException, Request

from asha_assist.security.principal import Principal
from asha_assist.security.tokens import TokenEngine

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Authenticated:
    principal: Principal


@dataclass(frozen=True)
class Anonymous:
    pass


AuthResult = Union[Authenticated, Anonymous]

ANONYMOUS = Anonymous()


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    token = auth_header[len(BEARER_PREFIX):].strip()
    return token or None


def authenticate(auth_header: Optional[str], engine: TokenEngine) -> AuthResult:
    token = extract_bearer_token(auth_header)
    if token is None:
        return ANONYMOUS
    principal = engine.validate(token)
    if principal is None:
        return ANONYMOUS
    return Authenticated(principal)


def get_auth_result(request: Request) -> AuthResult:
    """AuthResult bound to the request by the security gate."""
    return getattr(request.state, "auth", ANONYMOUS)


async def get_current_principal(request: Request) -> Principal:
    """
    FastAPI dependency handing the caller's identity to route handlers, which
    pass it explicitly into service operations.
    """
    result = get_auth_result(request)
    if not isinstance(result, Authenticated):
        raise HTTPException(status_code=401, detail="Authentication required")
    return result.principal
