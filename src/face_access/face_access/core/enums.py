from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles used for authorization."""

    ADMIN = "admin"
    USER = "user"
    KIOSK = "kiosk"


class ActionKind(str, Enum):
    """Kind of an access log entry, as stored in `access_logs.type`."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"

    @property
    def label(self) -> str:
        return "Check-in" if self is ActionKind.CHECK_IN else "Check-out"

    @property
    def opposite(self) -> "ActionKind":
        return ActionKind.CHECK_OUT if self is ActionKind.CHECK_IN else ActionKind.CHECK_IN
