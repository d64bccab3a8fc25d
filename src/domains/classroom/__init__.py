# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Classroom domain package.

This package provides classroom lookups for the enrollment ledger,
rosters and classroom archiving.
"""

from src.domains.classroom.service import (
    ClassroomAlreadyArchivedError,
    ClassroomHasActiveStudentsError,
    ClassroomService,
)
from src.domains.enrollment.exceptions import ClassroomNotFoundError

__all__ = [
    "ClassroomService",
    "ClassroomNotFoundError",
    "ClassroomAlreadyArchivedError",
    "ClassroomHasActiveStudentsError",
]
