from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, organization_id, employee_code, name, face_token"


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        organization_id=int(row["organization_id"]),
        employee_code=str(row["employee_code"]),
        name=row["name"],
        face_token=row["face_token"],
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def find_by_face_token(self, face_token: str, organization_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE face_token=%s AND organization_id=%s",
                (face_token, int(organization_id)),
            )
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_for_organization(self, organization_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE organization_id=%s ORDER BY name",
                (int(organization_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]
