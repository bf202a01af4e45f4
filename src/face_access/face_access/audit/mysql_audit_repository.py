from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..attendance.mysql_attendance_repository import ENTRY_COLUMNS, entry_from_row
from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AuditEntry, AuditEntryView
from .repository import AuditRepository, EditSession


class _MySQLEditSession(EditSession):
    def __init__(self, cur, access_log_id: int, entry):
        self._cur = cur
        self._access_log_id = access_log_id
        self.entry = entry

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
        self._cur.execute(
            """
            INSERT INTO access_log_edits(
                access_log_id, admin_user_id, previous_timestamp, new_timestamp, reason, evidence_url, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                self._access_log_id,
                int(admin_id),
                to_db_datetime(previous_timestamp),
                to_db_datetime(new_timestamp),
                reason,
                evidence_url,
                to_db_datetime(created_at),
            ),
        )
        return AuditEntry(
            audit_id=int(self._cur.lastrowid),
            access_log_id=self._access_log_id,
            admin_id=int(admin_id),
            previous_timestamp=previous_timestamp,
            new_timestamp=new_timestamp,
            reason=reason,
            created_at=created_at,
            evidence_url=evidence_url,
        )

    def apply_edit(self, *, new_timestamp: datetime, edited_at: datetime, edited_by: int) -> None:
        self._cur.execute(
            """
            UPDATE access_logs
            SET `timestamp`=%s, edited_by_admin=1, edited_at=%s, edited_by=%s
            WHERE access_log_id=%s
            """,
            (to_db_datetime(new_timestamp), to_db_datetime(edited_at), int(edited_by), self._access_log_id),
        )
        if self._cur.rowcount < 1:
            raise StorageError("Access log update affected no rows")


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def edit_session(self, access_log_id: int) -> Iterator[EditSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {ENTRY_COLUMNS} FROM access_logs al WHERE al.access_log_id=%s FOR UPDATE",
                (int(access_log_id),),
            )
            r = fetchone(cur)
            yield _MySQLEditSession(cur, int(access_log_id), entry_from_row(r) if r else None)

    def list_for_entry(self, access_log_id: int) -> Sequence[AuditEntryView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ed.edit_id, ed.access_log_id, ed.admin_user_id, ed.previous_timestamp,
                       ed.new_timestamp, ed.reason, ed.evidence_url, ed.created_at,
                       u.full_name, u.email
                FROM access_log_edits ed
                LEFT JOIN users u ON u.user_id = ed.admin_user_id
                WHERE ed.access_log_id=%s
                ORDER BY ed.created_at ASC, ed.edit_id ASC
                """,
                (int(access_log_id),),
            )
            return [
                AuditEntryView(
                    audit=AuditEntry(
                        audit_id=int(r["edit_id"]),
                        access_log_id=int(r["access_log_id"]),
                        admin_id=int(r["admin_user_id"]),
                        previous_timestamp=from_db_datetime(r["previous_timestamp"]),
                        new_timestamp=from_db_datetime(r["new_timestamp"]),
                        reason=r["reason"],
                        created_at=from_db_datetime(r["created_at"]),
                        evidence_url=r.get("evidence_url"),
                    ),
                    admin_name=r.get("full_name") or r.get("email") or "Admin",
                )
                for r in fetchall(cur)
            ]
