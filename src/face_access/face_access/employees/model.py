from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    """Domain entity: an enrolled employee.

    Note: `face_token` is an opaque identity issued by the face provider; it
    resolves to at most one employee per organization.
    """

    employee_id: int
    organization_id: int
    employee_code: str
    name: str
    face_token: str
