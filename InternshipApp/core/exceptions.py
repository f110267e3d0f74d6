"""Domain error taxonomy.

The errors derive from DRF's ``APIException`` so that domain services can raise
them directly and the API layer renders them with the right status code and a
structured body, e.g.::

    {"detail": "Review notes must be at least 10 characters.", "field": "notes"}
"""

from typing import Any

from rest_framework import status
from rest_framework.exceptions import APIException


class DomainError(APIException):
    """Base class for lifecycle errors carrying structured context."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "domain_error"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or str(self.default_detail)
        self.context = {key: value for key, value in context.items() if value is not None}
        super().__init__({"detail": self.message, **self.context}, code=self.default_code)

    def __str__(self) -> str:
        return self.message


class ValidationError(DomainError):
    """Malformed or precondition-violating input."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Semantic validation failed."
    default_code = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message, field=field)


class NotFoundError(DomainError):
    """Referenced task, submission or student does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"

    def __init__(self, resource: str, identifier: Any) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found", resource=resource, identifier=str(identifier))


class InvalidStateError(DomainError):
    """Operation attempted from a state that does not permit it."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not permitted in the current state."
    default_code = "invalid_state"

    def __init__(self, message: str, current: str, expected: list[str] | str | None = None) -> None:
        self.current = str(current)
        if isinstance(expected, str):
            expected = [expected]
        self.expected = [str(state) for state in expected] if expected else []
        super().__init__(message, current=self.current, expected=self.expected or None)


class AuthorizationError(DomainError):
    """Actor role or identity does not match what the operation requires."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = "permission_denied"

    def __init__(self, message: str, required_role: str | None = None, actor_role: str | None = None) -> None:
        self.required_role = required_role
        self.actor_role = actor_role
        super().__init__(message, required_role=required_role, actor_role=actor_role)
