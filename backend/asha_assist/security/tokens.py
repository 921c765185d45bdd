"""
Token engine: issues and validates stateless HS256 session tokens.

Claims are {sub, role, iat, exp}. Lifetime is absolute (no renewal). Every
rejection reason collapses to ``None`` for the caller; the reason is only
logged.
"""

from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from asha_assist.config import get_settings
from asha_assist.security.principal import Principal, Role
from asha_assist.time_utils import utc_now

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_LIFETIME = timedelta(days=7)


class TokenEngine:
    def __init__(
        self,
        secret: bytes,
        lifetime: timedelta = DEFAULT_LIFETIME,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._lifetime = lifetime
        self._clock = clock

    def issue(self, principal: Principal) -> str:
        issued_at = self._clock()
        payload = {
            "sub": principal.username,
            "role": principal.role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate(self, token: str) -> Optional[Principal]:
        """Return the principal encoded in ``token`` or None if it is not acceptable."""
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            logger.info("token_rejected", reason="malformed")
            return None
        if header.get("alg") != ALGORITHM:
            logger.info("token_rejected", reason="algorithm", alg=header.get("alg"))
            return None

        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except ExpiredSignatureError:
            logger.info("token_rejected", reason="expired")
            return None
        except JWTClaimsError as exc:
            logger.info("token_rejected", reason="claims", error=str(exc))
            return None
        except JWTError as exc:
            logger.info("token_rejected", reason="signature", error=str(exc))
            return None

        subject = payload.get("sub")
        if not subject or "exp" not in payload:
            logger.info("token_rejected", reason="missing_claims")
            return None
        try:
            role = Role(payload.get("role"))
        except ValueError:
            logger.info("token_rejected", reason="unknown_role", subject=subject)
            return None
        return Principal(username=subject, role=role)


@lru_cache()
def get_token_engine() -> TokenEngine:
    """Process-wide engine built once from settings."""
    settings = get_settings()
    return TokenEngine(
        secret=settings.jwt_signing_key,
        lifetime=timedelta(days=settings.jwt_expiration_days),
    )
