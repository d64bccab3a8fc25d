# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and the response envelope used by every endpoint."""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class StudentStatus(str, Enum):
    """Lifecycle status of a student."""

    ACTIVE = "ACTIVE"
    TRANSFERRED = "TRANSFERRED"
    GRADUATED = "GRADUATED"
    INACTIVE = "INACTIVE"


class ClassroomStatus(str, Enum):
    """Lifecycle status of a classroom."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class EnrollmentReason(str, Enum):
    """Cause that opened or closed an enrollment record."""

    ENROLLMENT = "ENROLLMENT"
    TRANSFER = "TRANSFER"
    GRADUATION = "GRADUATION"
    WITHDRAWAL = "WITHDRAWAL"


class UserRole(str, Enum):
    """Roles carried in access tokens."""

    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope.

    Attributes:
        ok: Always True for successful responses.
        code: HTTP status code.
        data: Response payload.
        message: Human-readable summary.
    """

    ok: bool = True
    code: int = 200
    data: T
    message: str = "Operation completed successfully"


class ErrorResponse(BaseModel):
    """Failure response envelope.

    Attributes:
        ok: Always False for failures.
        code: HTTP status code.
        data: Always empty.
        errors: List of error messages.
        message: Human-readable summary.
    """

    ok: bool = False
    code: int
    data: dict[str, Any] = Field(default_factory=dict)
    errors: list[Any] = Field(default_factory=list)
    message: str
