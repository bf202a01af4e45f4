from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from ..common.clock import OrgClock
from ..core.constants import DEFAULT_AUTO_CLOSE_TIME
from ..core.enums import ActionKind
from ..core.exceptions import DuplicateActionError
from ..employees.service import EmployeeDirectory
from .model import AccessLogEntry, RegistrationResult
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: turn a recognized employee's check-in/check-out request into ledger entries.

    Each request runs inside one per-employee ledger transaction:

    1. read the last entry;
    2. if it is a check-in from an earlier local day and a new check-in is
       requested, append a synthesized check-out at the auto-close time of
       that day;
    3. otherwise reject a repeat of the last action;
    4. append the requested action at `now`.

    Only the immediately preceding open check-in is closed. Same-day open
    check-ins are left for an administrator to correct.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        directory: EmployeeDirectory,
        *,
        clock: Optional[OrgClock] = None,
        auto_close_time: time = DEFAULT_AUTO_CLOSE_TIME,
    ):
        self._ledger = ledger
        self._directory = directory
        self._clock = clock or OrgClock()
        self._auto_close_time = auto_close_time

    def register_access(
        self,
        employee_id: int,
        action: ActionKind,
        *,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        employee = self._directory.get(employee_id)
        now = self._clock.normalize(now) if now else self._clock.now()

        with self._ledger.locked_for_employee(employee.employee_id) as txn:
            last = txn.last_entry()

            auto_close = None
            if self._needs_auto_close(last, action, now):
                auto_close = txn.append(
                    action=ActionKind.CHECK_OUT,
                    timestamp=self._auto_close_at(last),
                    auto_generated=True,
                )
                last = txn.last_entry()

            if auto_close is None and last is not None and last.action == action:
                logger.info(
                    "duplicate %s rejected employee_id=%s last_entry=%s",
                    action.value, employee.employee_id, last.entry_id,
                )
                raise DuplicateActionError(
                    self._duplicate_message(action, last),
                    last_action=last.action,
                    last_timestamp=last.timestamp,
                )

            entry = txn.append(action=action, timestamp=now, auto_generated=False)

        if auto_close is not None:
            logger.info(
                "auto-closed check-in employee_id=%s auto_close_entry=%s",
                employee.employee_id, auto_close.entry_id,
            )
        logger.info("registered %s employee_id=%s entry=%s", action.value, employee.employee_id, entry.entry_id)

        return RegistrationResult(
            entry=entry,
            employee=employee,
            auto_close_generated=auto_close is not None,
            auto_close_entry=auto_close,
        )

    def register_by_face(
        self,
        *,
        image: bytes,
        action: ActionKind,
        organization_id: int,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        """Identify the employee inside the caller's organization, then register."""
        employee = self._directory.identify(image, organization_id)
        return self.register_access(employee.employee_id, action, now=now)

    def _needs_auto_close(self, last: Optional[AccessLogEntry], action: ActionKind, now: datetime) -> bool:
        if last is None:
            return False
        if last.action != ActionKind.CHECK_IN or action != ActionKind.CHECK_IN:
            return False
        return self._clock.local_date(last.timestamp) < self._clock.local_date(now)

    def _auto_close_at(self, last: AccessLogEntry) -> datetime:
        """Auto-close time on the check-in's local day, never before the check-in itself."""
        close_at = self._clock.at_local_time(self._clock.local_date(last.timestamp), self._auto_close_time)
        opened_at = self._clock.normalize(last.timestamp)
        if close_at <= opened_at:
            return opened_at + timedelta(microseconds=1)
        return close_at

    def _duplicate_message(self, action: ActionKind, last: AccessLogEntry) -> str:
        at = self._clock.format_local(last.timestamp)
        return (
            f"Cannot register a {action.label.lower()} twice in a row. "
            f"Your last action was a {last.action.label.lower()} at {at}. "
            f"Register a {action.opposite.label.lower()} first."
        )
