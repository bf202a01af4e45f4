from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AccessLogRow
from ..attendance.repository import AttendanceLedger
from ..common.clock import OrgClock, format_duration
from ..core.constants import DEFAULT_LAST_LOGS_LIMIT, MAX_LAST_LOGS_LIMIT
from ..core.enums import ActionKind
from ..core.exceptions import ValidationError
from ..employees.service import EmployeeDirectory
from ..users.service import SessionActor, require_admin
from .calculator.base import WorkedHoursCalculator
from .calculator.greedy_pairing import GreedyPairingCalculator


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    stats: dict
    summary: list[dict]


class ReportService:
    def __init__(
        self,
        ledger: AttendanceLedger,
        directory: EmployeeDirectory,
        *,
        clock: Optional[OrgClock] = None,
        calculator: Optional[WorkedHoursCalculator] = None,
    ):
        self._ledger = ledger
        self._directory = directory
        self._clock = clock or OrgClock()
        self._calculator = calculator or GreedyPairingCalculator(self._clock)

    def build_access_report(
        self,
        actor: SessionActor,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        require_admin(actor, "Only administrators can view reports")
        if start > end:
            raise ValidationError("Start date must be on or before end date", fields={"startDate": "after_end"})

        start_at, end_at = self._clock.day_bounds(start, end)
        rows = self._ledger.list_in_range(
            organization_id=actor.organization_id,
            start=start_at,
            end=end_at,
            employee_id=employee_id,
        )

        out_rows = [self.row_to_dict(r) for r in rows]

        stats = {
            "total": len(rows),
            "check_ins": sum(1 for r in rows if r.entry.action == ActionKind.CHECK_IN),
            "check_outs": sum(1 for r in rows if r.entry.action == ActionKind.CHECK_OUT),
            "auto_generated": sum(1 for r in rows if r.entry.auto_generated),
            "edited_by_admin": sum(1 for r in rows if r.entry.edited_by_admin),
        }

        grouped: dict[int, list[AccessLogRow]] = {}
        for r in rows:
            grouped.setdefault(r.entry.employee_id, []).append(r)

        summary = []
        for emp_id, emp_rows in grouped.items():
            worked = self._calculator.summarize(r.entry for r in emp_rows)
            summary.append(
                {
                    "employee_id": emp_id,
                    "employee_name": emp_rows[0].employee_name,
                    "employee_code": emp_rows[0].employee_code,
                    "total_hours": format_duration(worked.total),
                    "total_minutes": int(worked.total.total_seconds() // 60),
                    "pairs": worked.pair_count,
                    "incomplete": worked.incomplete_count,
                    "per_day": [
                        {"date": d.day.isoformat(), "hours": format_duration(d.worked), "pairs": d.pairs}
                        for d in worked.per_day
                    ],
                }
            )

        summary.sort(key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, stats=stats, summary=summary)

    def list_employees(self, actor: SessionActor) -> list[dict]:
        require_admin(actor, "Only administrators can view reports")
        employees = sorted(self._directory.list_for_organization(actor.organization_id), key=lambda e: e.name.lower())
        return [
            {"employee_id": e.employee_id, "name": e.name, "employee_code": e.employee_code}
            for e in employees
        ]

    def last_logs(self, actor: SessionActor, limit: Optional[int] = None) -> list[dict]:
        limit = DEFAULT_LAST_LOGS_LIMIT if limit is None else int(limit)
        limit = max(1, min(limit, MAX_LAST_LOGS_LIMIT))
        rows = self._ledger.list_recent(organization_id=actor.organization_id, limit=limit)
        return [self.row_to_dict(r) for r in rows]

    def row_to_dict(self, r: AccessLogRow) -> dict:
        e = r.entry
        local = self._clock.to_local(e.timestamp)
        return {
            "access_log_id": e.entry_id,
            "employee_id": e.employee_id,
            "employee_name": r.employee_name,
            "employee_code": r.employee_code,
            "timestamp": self._clock.normalize(e.timestamp).isoformat(),
            "local_date": local.strftime("%Y-%m-%d"),
            "local_time": local.strftime("%H:%M:%S"),
            "type": e.action.value,
            "type_label": e.action.label,
            "auto_generated": e.auto_generated,
            "edited_by_admin": e.edited_by_admin,
            "edited_at": self._clock.normalize(e.edited_at).isoformat() if e.edited_at else None,
        }
