"""
Domain error taxonomy.

Raised by the kernel and engines, rendered to HTTP by a single exception
handler in main.py. Messages are surfaced to the caller verbatim.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """
    Base class for all domain errors.

    Every error carries:
    - message: human readable reason, returned to the caller as-is
    - details: optional structured context (ids, offending values)
    """

    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NotFound(DomainError):
    """Referenced entity is absent."""

    code = "not_found"
    status_code = 404


class InvalidRole(DomainError):
    """Entity exists but has the wrong role for the operation."""

    code = "invalid_role"
    status_code = 400


class InvalidFormat(DomainError):
    """A month key, date or other formatted value is malformed."""

    code = "invalid_format"
    status_code = 400


class Forbidden(DomainError):
    """The authorization decision denied the request."""

    code = "forbidden"
    status_code = 403


class Conflict(DomainError):
    """Unique key violation on a direct insert."""

    code = "conflict"
    status_code = 409


class Internal(DomainError):
    """Unexpected store failure. Any partial work has been rolled back."""

    code = "internal"
    status_code = 500
