from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.exceptions import EmployeeNotFoundError, FaceNotFoundError, IdentityProviderUnavailableError
from ..identity.provider import FaceIdentityProvider
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeDirectory:
    """Use case: resolve employees by id or by face, always inside one organization."""

    def __init__(self, employees: EmployeeRepository, faces: Optional[FaceIdentityProvider] = None):
        self._employees = employees
        self._faces = faces

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFoundError("Employee not found")
        return employee

    def find_by_face_token(self, face_token: str, organization_id: int) -> Employee:
        employee = self._employees.find_by_face_token(face_token, int(organization_id))
        if not employee:
            raise EmployeeNotFoundError("No employee is associated with this face")
        return employee

    def identify(self, image: bytes, organization_id: int) -> Employee:
        if self._faces is None:
            raise IdentityProviderUnavailableError("Face recognition is not configured")

        match = self._faces.identify(image)
        if match is None:
            raise FaceNotFoundError("Could not identify the employee from the image")

        employee = self.find_by_face_token(match.face_token, organization_id)
        logger.info("face identified employee_id=%s org=%s", employee.employee_id, organization_id)
        return employee

    def list_for_organization(self, organization_id: int) -> Sequence[Employee]:
        return self._employees.list_for_organization(int(organization_id))
