from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AuditEntry:
    """Append-only record of one administrative timestamp edit."""

    audit_id: int
    access_log_id: int
    admin_id: int
    previous_timestamp: datetime
    new_timestamp: datetime
    reason: str
    created_at: datetime
    evidence_url: Optional[str] = None


@dataclass(frozen=True)
class AuditEntryView:
    """Audit record as shown to administrators."""

    audit: AuditEntry
    admin_name: str


@dataclass(frozen=True)
class EditResult:
    access_log_id: int
    previous_timestamp: datetime
    new_timestamp: datetime
    audit: AuditEntry
