from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    WORKER = "ASHA_KARMI"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Principal:
    """Identity derived from a validated session token. Never persisted."""
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
