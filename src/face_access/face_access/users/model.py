from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Actor:
    """Domain entity: an account that can sign in (admin, regular user or kiosk).

    Note: plain data object, no DB access.
    """

    user_id: int
    organization_id: int
    email: str
    full_name: Optional[str]
    password_hash: str
    role: Role
    is_active: bool = True
