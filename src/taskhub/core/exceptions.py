"""Custom exceptions for TaskHub.

All exceptions derive from :class:`TaskHubError` so callers can catch the
entire family with a single ``except TaskHubError`` clause.  Each class
carries the HTTP status the API layer uses by default and a short machine
readable ``code``.

Hierarchy::

    TaskHubError
    ├── NotFoundError                 (404)
    │   └── InvalidInvitationTokenError
    ├── UnauthorizedError             (401)
    │   └── InvalidCredentialsError
    ├── ForbiddenError                (400)
    ├── ConflictError                 (400)
    │   └── InvalidTransitionError
    └── ConfigurationError            (500)
"""

from __future__ import annotations

from typing import Any


class TaskHubError(Exception):
    """Base exception for all TaskHub errors."""

    status_code: int = 500
    code: str = "taskhub_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class NotFoundError(TaskHubError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        entity: str,
        identifier: Any = None,
        details: dict[str, Any] | None = None,
        *,
        message: str | None = None,
    ) -> None:
        super().__init__(message or f"{entity} not found", details)
        self.entity = entity
        self.identifier = identifier


class InvalidInvitationTokenError(NotFoundError):
    """Raised when an invitation token cannot be decoded."""

    code = "invalid_invitation_token"

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("Invitation", details=details, message="Invalid invitation token")


class UnauthorizedError(TaskHubError):
    """Raised when the caller cannot be authenticated or is not the addressed user."""

    status_code = 401
    code = "unauthorized"


class InvalidCredentialsError(UnauthorizedError):
    """Raised by login for an unknown email, a wrong password or an inactive account."""

    code = "invalid_credentials"


class ForbiddenError(TaskHubError):
    """Raised when an authenticated user lacks the project role an operation needs."""

    status_code = 400
    code = "forbidden"


class ConflictError(TaskHubError):
    """Raised when an operation violates a business rule or workflow state."""

    status_code = 400
    code = "conflict"


class InvalidTransitionError(ConflictError):
    """Raised when a status change is not allowed by the entity's transition table."""

    code = "invalid_transition"

    def __init__(
        self,
        entity: str,
        current: str,
        target: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"{entity} cannot move from {current!r} to {target!r}",
            details,
        )
        self.entity = entity
        self.current = current
        self.target = target


class ConfigurationError(TaskHubError):
    """Raised when :class:`~taskhub.core.config.TaskHubConfig` contains an invalid value."""

    code = "configuration_error"

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidInvitationTokenError",
    "InvalidTransitionError",
    "NotFoundError",
    "TaskHubError",
    "UnauthorizedError",
]
