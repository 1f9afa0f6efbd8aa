"""Typed errors raised by actions.

Every failure carries an :class:`ErrorKind` so callers (the HTTP layer,
tests) can branch on the failure category instead of parsing messages.
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Failure categories surfaced by actions."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    IDENTITY_PROVIDER = "identity_provider"
    INTERNAL = "internal"


class ActionError(Exception):
    """Base class for errors raised by actions."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class UnauthorizedError(ActionError):
    """Raised when there is no authenticated session."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(ActionError):
    """Raised when the session lacks organization membership or the required role."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(ActionError):
    """Raised when a referenced row does not exist."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(ActionError):
    """Raised when input breaks a business rule."""

    kind = ErrorKind.VALIDATION


class IdentityProviderError(ActionError):
    """Raised when the identity provider cannot be reached or answers with an error."""

    kind = ErrorKind.IDENTITY_PROVIDER

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
