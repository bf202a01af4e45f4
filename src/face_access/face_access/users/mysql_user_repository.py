from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Actor
from .repository import UserRepository

_COLUMNS = "user_id, organization_id, email, full_name, password_hash, role, is_active"


def _to_actor(row: dict) -> Actor:
    return Actor(
        user_id=int(row["user_id"]),
        organization_id=int(row["organization_id"]),
        email=row["email"],
        full_name=row.get("full_name"),
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[Actor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_actor(row) if row else None
