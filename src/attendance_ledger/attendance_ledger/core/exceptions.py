from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Every domain error carries a stable ``code`` so callers can tell which rule fired
    without parsing the message.
    """

    kind = "domain"
    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""

    kind = "validation"
    default_code = "INVALID_INPUT"


class NotFoundError(DomainError):
    """Raised when an employee or attendance record does not exist."""

    kind = "not_found"
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when the requested change clashes with existing state."""

    kind = "conflict"
    default_code = "CONFLICT"


class TimeWindowError(DomainError):
    """Raised when an event falls outside the permitted hours."""

    kind = "time_window"
    default_code = "OUTSIDE_WORKING_HOURS"


class UnexpectedError(DomainError):
    """Unexpected failure (storage unreachable, ...). Message is safe to show."""

    kind = "system"
    default_code = "SYSTEM_ERROR"
