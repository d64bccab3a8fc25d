# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the enrollment ledger:
- Enrollment into a classroom under capacity
- Transfers between classrooms
- Ending enrollments and closing them on graduation
- Roster, history and seat-count queries
"""

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledElsewhereError,
    AlreadyEnrolledError,
    ClassroomArchivedError,
    ClassroomFullError,
    ClassroomNotFoundError,
    ConcurrentEnrollmentError,
    EnrollmentError,
    EnrollmentNotFoundError,
    InvalidIdentifierError,
    LedgerTransactionError,
    MissingIdentifierError,
    NoActiveEnrollmentError,
    SameClassroomTransferError,
    StudentNotFoundError,
)
from src.domains.enrollment.service import (
    ClassroomStore,
    EnrollmentLedger,
    StudentStore,
)

__all__ = [
    "EnrollmentLedger",
    "StudentStore",
    "ClassroomStore",
    "EnrollmentError",
    "StudentNotFoundError",
    "ClassroomNotFoundError",
    "EnrollmentNotFoundError",
    "ClassroomArchivedError",
    "ClassroomFullError",
    "AlreadyEnrolledError",
    "AlreadyEnrolledElsewhereError",
    "SameClassroomTransferError",
    "ConcurrentEnrollmentError",
    "NoActiveEnrollmentError",
    "MissingIdentifierError",
    "InvalidIdentifierError",
    "LedgerTransactionError",
]
