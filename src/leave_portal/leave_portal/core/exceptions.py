from __future__ import annotations

from typing import Iterable, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain-error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `errors` keeps every field message so forms can show all of them at once.
    """

    code = "validation-error"

    def __init__(self, message: str | Iterable[str]):
        if isinstance(message, str):
            errors = [message]
        else:
            errors = [m for m in message if m]
        self.errors = errors
        super().__init__(". ".join(errors))


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication-error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization-error"


class NotFoundError(DomainError):
    code = "not-found"


class InvalidTransitionError(DomainError):
    """Raised when an attendance action is not allowed from the current state."""

    code = "invalid-transition"


class ConflictError(DomainError):
    """Raised on uniqueness conflicts (duplicate email / employee id)."""

    code = "conflict"


class RemoteUnavailableError(DomainError):
    """Raised by remote repositories when the backend call fails.

    Services with a local fallback catch it. Auth and profile calls have none,
    so there it surfaces as 503.
    """

    code = "remote-unavailable"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing."""
