from __future__ import annotations

from typing import Optional, Protocol

from .model import Actor


class UserRepository(Protocol):
    """Repository interface for sign-in accounts.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_email(self, email: str) -> Optional[Actor]:
        raise NotImplementedError
