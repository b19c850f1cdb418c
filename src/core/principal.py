from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Principal roles."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """An authenticated identity: the username and its role."""

    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
