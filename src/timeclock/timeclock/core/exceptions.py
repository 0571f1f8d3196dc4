from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is a stable, machine-readable identifier returned to API clients.
    """

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class InvalidInput(ValidationError):
    """Malformed time string, out-of-range minute value or reversed punches."""

    code = "INVALID_INPUT"


class AttendanceStateError(ValidationError):
    """A punch that is not allowed from the record's current state."""

    code = "INVALID_STATE"


class AlreadyCheckedIn(AttendanceStateError):
    code = "ALREADY_CHECKED_IN"


class NotCheckedIn(AttendanceStateError):
    code = "NO_CHECK_IN"


class AlreadyCheckedOut(AttendanceStateError):
    code = "ALREADY_CHECKED_OUT"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class AuthenticationError(DomainError):
    """Raised when the caller identity is missing or unknown."""

    code = "UNAUTHORIZED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
