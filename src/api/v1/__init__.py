# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    enrollments: Enrollment, transfer, end, current enrollment and history.
    students: Student graduation.
    classrooms: Classroom roster and archiving.
"""

from fastapi import APIRouter

from src.api.v1 import classrooms, enrollments, students

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(enrollments.router, tags=["Enrollments"])
router.include_router(students.router, tags=["Students"])
router.include_router(classrooms.router, tags=["Classrooms"])

__all__ = ["router"]
