from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for employees (read side; enrollment lives elsewhere)."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_face_token(self, face_token: str, organization_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[Employee]:
        raise NotImplementedError
