from __future__ import annotations

from datetime import datetime
from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `fields` maps a field name to its error message when the failure can be
    attributed to specific inputs.
    """

    def __init__(self, message: str, *, fields: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})


class DuplicateActionError(DomainError):
    """Raised when an employee repeats the action of their last ledger entry."""

    def __init__(self, message: str, *, last_action, last_timestamp: datetime):
        super().__init__(message)
        self.last_action = last_action
        self.last_timestamp = last_timestamp


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an entity does not exist in the actor's organization."""


class EmployeeNotFoundError(NotFoundError):
    """No employee matches the given id or face token."""


class FaceNotFoundError(NotFoundError):
    """The face identity provider found no matching face."""


class StorageError(DomainError):
    """Raised when the persistence layer fails."""


class IdentityProviderUnavailableError(DomainError):
    """Raised when face identification is requested but no provider is configured."""
