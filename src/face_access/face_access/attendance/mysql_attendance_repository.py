from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..core.enums import ActionKind
from ..core.exceptions import EmployeeNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AccessLogEntry, AccessLogRow
from .repository import AttendanceLedger, LedgerTransaction

ENTRY_COLUMNS = (
    "al.access_log_id, al.employee_id, al.`timestamp`, al.type, "
    "al.auto_generated, al.edited_by_admin, al.edited_at, al.edited_by"
)

_ROW_SELECT = f"""
    SELECT {ENTRY_COLUMNS}, e.organization_id, e.name AS employee_name, e.employee_code
    FROM access_logs al
    JOIN employees e ON e.employee_id = al.employee_id
"""


def entry_from_row(r: dict) -> AccessLogEntry:
    return AccessLogEntry(
        entry_id=int(r["access_log_id"]),
        employee_id=int(r["employee_id"]),
        timestamp=from_db_datetime(r["timestamp"]),
        action=ActionKind(r["type"]),
        auto_generated=bool(r.get("auto_generated")),
        edited_by_admin=bool(r.get("edited_by_admin")),
        edited_at=from_db_datetime(r.get("edited_at")),
        edited_by=int(r["edited_by"]) if r.get("edited_by") is not None else None,
    )


def _to_row(r: dict) -> AccessLogRow:
    return AccessLogRow(
        entry=entry_from_row(r),
        organization_id=int(r["organization_id"]),
        employee_name=r["employee_name"],
        employee_code=str(r["employee_code"]),
    )


class _MySQLLedgerTransaction(LedgerTransaction):
    def __init__(self, cur, employee_id: int):
        self._cur = cur
        self._employee_id = employee_id

    def last_entry(self) -> Optional[AccessLogEntry]:
        self._cur.execute(
            f"""
            SELECT {ENTRY_COLUMNS}
            FROM access_logs al
            WHERE al.employee_id=%s
            ORDER BY al.`timestamp` DESC, al.access_log_id DESC
            LIMIT 1
            """,
            (self._employee_id,),
        )
        r = fetchone(self._cur)
        return entry_from_row(r) if r else None

    def append(self, *, action: ActionKind, timestamp: datetime, auto_generated: bool) -> AccessLogEntry:
        self._cur.execute(
            """
            INSERT INTO access_logs(employee_id, `timestamp`, type, auto_generated)
            VALUES(%s,%s,%s,%s)
            """,
            (self._employee_id, to_db_datetime(timestamp), action.value, int(auto_generated)),
        )
        return AccessLogEntry(
            entry_id=int(self._cur.lastrowid),
            employee_id=self._employee_id,
            timestamp=timestamp,
            action=action,
            auto_generated=auto_generated,
        )


class MySQLAttendanceRepository(AttendanceLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def locked_for_employee(self, employee_id: int) -> Iterator[LedgerTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the employee serializes concurrent requests until commit.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
            if not fetchone(cur):
                raise EmployeeNotFoundError("Employee not found")
            yield _MySQLLedgerTransaction(cur, int(employee_id))

    def get_row(self, access_log_id: int) -> Optional[AccessLogRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_ROW_SELECT} WHERE al.access_log_id=%s", (int(access_log_id),))
            r = fetchone(cur)
            return _to_row(r) if r else None

    def list_in_range(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
    ) -> Sequence[AccessLogRow]:
        clauses = ["e.organization_id=%s", "al.`timestamp` BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), to_db_datetime(start), to_db_datetime(end)]

        if employee_id is not None:
            clauses.append("al.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ROW_SELECT} WHERE {where} ORDER BY al.`timestamp` DESC, al.access_log_id DESC",
                tuple(params),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def list_recent(self, *, organization_id: int, limit: int) -> Sequence[AccessLogRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_ROW_SELECT}
                WHERE e.organization_id=%s
                ORDER BY al.`timestamp` DESC, al.access_log_id DESC
                LIMIT %s
                """,
                (int(organization_id), int(limit)),
            )
            return [_to_row(r) for r in fetchall(cur)]
