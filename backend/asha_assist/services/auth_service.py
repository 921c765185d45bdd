"""Account registration and login."""

from typing import Optional

import structlog
from fastapi import Depends

from asha_assist.exceptions import InvalidCredentials, MissingRequiredField, UsernameTaken
from asha_assist.models import User
from asha_assist.security.passwords import hash_password, verify_password
from asha_assist.security.principal import Principal, Role
from asha_assist.security.tokens import TokenEngine, get_token_engine
from asha_assist.storage import Storage, get_storage
from asha_assist.time_utils import utc_now

logger = structlog.get_logger(__name__)


class AuthService:
    def __init__(self, storage: Storage, token_engine: TokenEngine):
        self.storage = storage
        self.token_engine = token_engine

    async def register(
        self,
        username: str,
        password: str,
        full_name: Optional[str] = None,
        role: Role = Role.WORKER,
    ) -> User:
        username = (username or "").strip()
        if not username:
            raise MissingRequiredField("username")
        if not password:
            raise MissingRequiredField("password")
        if await self.storage.find_user_by_username(username) is not None:
            raise UsernameTaken(username)

        user = await self.storage.save_user(
            User(
                username=username,
                full_name=(full_name or username).strip(),
                password_hash=hash_password(password),
                role=role.value,
                created_at=utc_now(),
            )
        )
        logger.info("user_registered", username=username, role=role.value)
        return user

    async def login(self, username: str, password: str) -> str:
        """Return a session token; unknown users and bad passwords fail alike."""
        user = await self.storage.find_user_by_username((username or "").strip())
        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("login_failed", username=username)
            raise InvalidCredentials()
        return self.token_engine.issue(Principal(username=user.username, role=Role(user.role)))


def get_auth_service(storage: Storage = Depends(get_storage)) -> AuthService:
    return AuthService(storage, get_token_engine())
