from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ActionKind
from ..employees.model import Employee


@dataclass(frozen=True)
class AccessLogEntry:
    """Domain entity: one check-in or check-out in an employee's ledger.

    `timestamp` is always a timezone-aware instant.
    """

    entry_id: int
    employee_id: int
    timestamp: datetime
    action: ActionKind
    auto_generated: bool = False
    edited_by_admin: bool = False
    edited_at: Optional[datetime] = None
    edited_by: Optional[int] = None


@dataclass(frozen=True)
class AccessLogRow:
    """Read-model for listings and reports: entry joined with its employee."""

    entry: AccessLogEntry
    organization_id: int
    employee_name: str
    employee_code: str


@dataclass(frozen=True)
class RegistrationResult:
    entry: AccessLogEntry
    employee: Employee
    auto_close_generated: bool
    auto_close_entry: Optional[AccessLogEntry] = None
