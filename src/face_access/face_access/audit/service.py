from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AccessLogRow
from ..attendance.repository import AttendanceLedger
from ..common.clock import OrgClock
from ..common.validators import parse_hh_mm, text_field
from ..core.constants import MIN_EDIT_REASON_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..users.service import SessionActor, require_admin
from .model import AuditEntryView, EditResult
from .repository import AuditRepository

logger = logging.getLogger(__name__)

_ENTRY_NOT_FOUND = "Access log not found"


class AuditTrailService:
    """Use case: administrators correct the time of day of an access log entry.

    Every correction writes an audit record first and then updates the entry,
    both in one transaction. An entry from another organization is reported
    exactly like a missing one.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        audit: AuditRepository,
        *,
        clock: Optional[OrgClock] = None,
        edit_auto_generated_only: bool = False,
    ):
        self._ledger = ledger
        self._audit = audit
        self._clock = clock or OrgClock()
        self._edit_auto_generated_only = edit_auto_generated_only

    def edit_entry_time(
        self,
        access_log_id: int,
        new_local_time: str,
        reason: str,
        actor: SessionActor,
        *,
        evidence_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> EditResult:
        require_admin(actor, "Only administrators can edit access logs")

        fields: dict[str, str] = {}
        new_time = None
        try:
            new_time = parse_hh_mm(new_local_time, "new_time")
        except ValidationError as e:
            fields.update(e.fields)

        try:
            reason = text_field(reason, "reason")
            if not reason:
                fields["reason"] = "required"
            elif len(reason) < MIN_EDIT_REASON_LENGTH:
                fields["reason"] = f"min_length:{MIN_EDIT_REASON_LENGTH}"
        except ValidationError as e:
            fields.update(e.fields)

        try:
            evidence_url = text_field(evidence_url, "evidence_url") or None
        except ValidationError as e:
            fields.update(e.fields)

        if fields:
            raise ValidationError(self._validation_message(fields), fields=fields)

        self._row_in_organization(access_log_id, actor)

        now = self._clock.normalize(now) if now else self._clock.now()

        with self._audit.edit_session(int(access_log_id)) as session:
            entry = session.entry
            if entry is None:
                raise NotFoundError(_ENTRY_NOT_FOUND)

            if self._edit_auto_generated_only and not entry.auto_generated:
                raise ValidationError(
                    "Only auto-generated entries can be edited",
                    fields={"access_log_id": "not_auto_generated"},
                )

            previous = entry.timestamp
            new_timestamp = self._clock.at_local_time(self._clock.local_date(previous), new_time)

            audit = session.insert_audit(
                admin_id=actor.user_id,
                previous_timestamp=previous,
                new_timestamp=new_timestamp,
                reason=reason,
                evidence_url=evidence_url,
                created_at=now,
            )
            session.apply_edit(new_timestamp=new_timestamp, edited_at=now, edited_by=actor.user_id)

        logger.info(
            "access log edited access_log_id=%s admin_id=%s audit_id=%s",
            access_log_id, actor.user_id, audit.audit_id,
        )
        return EditResult(
            access_log_id=int(access_log_id),
            previous_timestamp=previous,
            new_timestamp=new_timestamp,
            audit=audit,
        )

    def get_edit_history(self, access_log_id: int, actor: SessionActor) -> Sequence[AuditEntryView]:
        require_admin(actor, "Only administrators can view edit history")
        self._row_in_organization(access_log_id, actor)
        return list(self._audit.list_for_entry(int(access_log_id)))

    def _row_in_organization(self, access_log_id: int, actor: SessionActor) -> AccessLogRow:
        row = self._ledger.get_row(int(access_log_id))
        if not row or row.organization_id != actor.organization_id:
            raise NotFoundError(_ENTRY_NOT_FOUND)
        return row

    @staticmethod
    def _validation_message(fields: dict[str, str]) -> str:
        if set(fields) == {"new_time"}:
            return "Invalid time format, use HH:MM (e.g. 17:30)"
        if set(fields) == {"reason"}:
            return f"A reason of at least {MIN_EDIT_REASON_LENGTH} characters is required"
        return "Invalid edit request"
