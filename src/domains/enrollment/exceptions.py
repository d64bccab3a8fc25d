# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment ledger exceptions."""

from src.core.errors import (
    BadRequestError,
    ConflictError,
    DomainError,
    NotFoundError,
    ServerError,
)


class EnrollmentError(DomainError):
    """Base exception for enrollment ledger errors."""

    pass


class StudentNotFoundError(NotFoundError, EnrollmentError):
    """Raised when the student is absent or active in no school of the caller."""

    def __init__(self, message: str = "Student not found in this school") -> None:
        super().__init__(message)


class ClassroomNotFoundError(NotFoundError, EnrollmentError):
    """Raised when the classroom is absent or belongs to another school."""

    def __init__(self, message: str = "Classroom not found in this school") -> None:
        super().__init__(message)


class EnrollmentNotFoundError(NotFoundError, EnrollmentError):
    """Raised when the enrollment record is absent or already closed."""

    def __init__(self, message: str = "Enrollment not found or already ended") -> None:
        super().__init__(message)


class ClassroomArchivedError(ConflictError, EnrollmentError):
    """Raised when an archived classroom is the target of a placement."""

    def __init__(self, message: str = "Classroom is archived") -> None:
        super().__init__(message)


class ClassroomFullError(ConflictError, EnrollmentError):
    """Raised when the classroom has no free seat."""

    def __init__(self, capacity: int, *, target: bool = False) -> None:
        prefix = "Target classroom" if target else "Classroom"
        super().__init__(
            f"{prefix} is at full capacity ({capacity} students)",
            {"capacity": capacity},
        )


class AlreadyEnrolledError(ConflictError, EnrollmentError):
    """Raised when the student already sits in the requested classroom."""

    def __init__(self, message: str = "Student is already enrolled in this classroom") -> None:
        super().__init__(message)


class AlreadyEnrolledElsewhereError(ConflictError, EnrollmentError):
    """Raised on enroll while the student is active in another classroom."""

    def __init__(
        self,
        message: str = "Student is already enrolled in another classroom; use transfer instead",
    ) -> None:
        super().__init__(message)


class SameClassroomTransferError(ConflictError, EnrollmentError):
    """Raised when a transfer targets the student's current classroom."""

    def __init__(self, message: str = "Student is already in this classroom") -> None:
        super().__init__(message)


class ConcurrentEnrollmentError(ConflictError, EnrollmentError):
    """Raised when a concurrent change won a uniqueness race."""

    def __init__(
        self,
        message: str = "Enrollment changed concurrently; retry the request",
    ) -> None:
        super().__init__(message)


class NoActiveEnrollmentError(BadRequestError, EnrollmentError):
    """Raised when a transfer is requested for a student with no active record."""

    def __init__(self, message: str = "Student has no active enrollment") -> None:
        super().__init__(message)


class MissingIdentifierError(BadRequestError, EnrollmentError):
    """Raised when a required identifier is empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required", {"field": field})


class InvalidIdentifierError(BadRequestError, EnrollmentError):
    """Raised when an identifier is not a UUID."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is not a valid identifier", {"field": field})


class LedgerTransactionError(ServerError, EnrollmentError):
    """Raised when the database fails in an unexpected way."""

    pass
