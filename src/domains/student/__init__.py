# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student lookups for the enrollment ledger and the
graduation flow.
"""

from src.domains.enrollment.exceptions import StudentNotFoundError
from src.domains.student.service import (
    StudentAlreadyGraduatedError,
    StudentNotGraduatableError,
    StudentService,
)

__all__ = [
    "StudentService",
    "StudentNotFoundError",
    "StudentAlreadyGraduatedError",
    "StudentNotGraduatableError",
]
