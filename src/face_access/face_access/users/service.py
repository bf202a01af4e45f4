from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionActor:
    """What we store into the Flask session after login."""

    user_id: int
    organization_id: int
    role: Role
    full_name: Optional[str]
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_session(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_session(cls, data: Optional[dict]) -> Optional["SessionActor"]:
        if not data or "user_id" not in data:
            return None
        try:
            return cls(
                user_id=int(data["user_id"]),
                organization_id=int(data["organization_id"]),
                role=Role(data["role"]),
                full_name=data.get("full_name"),
                email=data.get("email", ""),
            )
        except (KeyError, TypeError, ValueError):
            return None


def require_admin(actor: SessionActor, message: str = "Administrator role required") -> None:
    if actor.role != Role.ADMIN:
        raise AuthorizationError(message)


class AuthService:
    """Use case: authenticate an account (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionActor:
        email = require_non_empty(email, "email").lower()
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password if isinstance(password, str) else "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("login user_id=%s role=%s", user.user_id, user.role.value)
        return SessionActor(
            user_id=user.user_id,
            organization_id=user.organization_id,
            role=user.role,
            full_name=user.full_name,
            email=user.email,
        )
