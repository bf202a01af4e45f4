from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..attendance.model import AccessLogEntry
from .model import AuditEntry, AuditEntryView


class EditSession(Protocol):
    """An access log entry locked for editing.

    `entry` is None when the id does not exist. Both writes commit together
    when the surrounding context exits cleanly.
    """

    entry: Optional[AccessLogEntry]

    def insert_audit(
        self,
        *,
        admin_id: int,
        previous_timestamp: datetime,
        new_timestamp: datetime,
        reason: str,
        evidence_url: Optional[str],
        created_at: datetime,
    ) -> AuditEntry:
        raise NotImplementedError

    def apply_edit(self, *, new_timestamp: datetime, edited_at: datetime, edited_by: int) -> None:
        raise NotImplementedError


class AuditRepository(Protocol):
    def edit_session(self, access_log_id: int) -> ContextManager[EditSession]:
        raise NotImplementedError

    def list_for_entry(self, access_log_id: int) -> Sequence[AuditEntryView]:
        """Audit records of one entry, oldest first."""
        raise NotImplementedError
