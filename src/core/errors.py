# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the domain services.

Every failure a caller can observe belongs to one of four kinds:
- NotFoundError: referenced entity absent or owned by another school
- ConflictError: the request collides with current state
- BadRequestError: the request itself is incomplete or not applicable
- ServerError: unexpected persistence or transaction failure

Domain packages subclass these kinds with specific errors. The HTTP layer
only needs the kind (status_code) and the human-readable message.
"""


class DomainError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code matching the error kind.
        details: Optional dictionary with additional error context.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return the human-readable message."""
        return self.message


class NotFoundError(DomainError):
    """Referenced entity is absent or outside the caller's school."""

    status_code = 404


class ConflictError(DomainError):
    """Request conflicts with the current state."""

    status_code = 409


class BadRequestError(DomainError):
    """Request is missing data or is not applicable."""

    status_code = 400


class ServerError(DomainError):
    """Unexpected persistence or transaction failure."""

    status_code = 500
