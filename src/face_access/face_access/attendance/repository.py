from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import ActionKind
from .model import AccessLogEntry, AccessLogRow


class LedgerTransaction(Protocol):
    """One employee's ledger tail, held exclusively until the transaction ends.

    Writes become visible to others only when the surrounding context exits
    without an exception; any exception discards all of them.
    """

    def last_entry(self) -> Optional[AccessLogEntry]:
        raise NotImplementedError

    def append(self, *, action: ActionKind, timestamp: datetime, auto_generated: bool) -> AccessLogEntry:
        raise NotImplementedError


class AttendanceLedger(Protocol):
    def locked_for_employee(self, employee_id: int) -> ContextManager[LedgerTransaction]:
        """Serialize read-decide-write sequences per employee."""
        raise NotImplementedError

    def get_row(self, access_log_id: int) -> Optional[AccessLogRow]:
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
    ) -> Sequence[AccessLogRow]:
        """Entries with start <= timestamp <= end, newest first."""
        raise NotImplementedError

    def list_recent(self, *, organization_id: int, limit: int) -> Sequence[AccessLogRow]:
        raise NotImplementedError
