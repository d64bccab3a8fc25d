# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student lifecycle API endpoints.

- PATCH /students/{student_id}/graduate - Graduate a student

Graduation closes the student's active enrollment and marks the student
GRADUATED in one transaction. Requires school admin or super admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DB, AdminUser, SchoolId
from src.api.errors import to_http_exception
from src.core.errors import DomainError
from src.domains.student.service import StudentService
from src.models.common import ApiResponse
from src.models.student import GraduationResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> StudentService:
    """Get student service instance."""
    return StudentService(db=db)


@router.patch(
    "/students/{student_id}/graduate",
    response_model=ApiResponse[GraduationResponse],
    status_code=status.HTTP_200_OK,
    summary="Graduate student",
    description="End the active enrollment and mark the student as graduated.",
)
async def graduate_student(
    student_id: UUID,
    current_user: AdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[GraduationResponse]:
    """Graduate a student.

    Args:
        student_id: Student identifier.
        current_user: Authenticated admin.
        school_id: Resolved school.
        db: Database session.

    Returns:
        The graduated student and the enrollment that was closed.

    Raises:
        HTTPException: 404 if the student is not found, 409 if already
            graduated or not ACTIVE.
    """
    service = _get_service(db)

    try:
        result = await service.graduate_student(
            student_id=str(student_id),
            school_id=school_id,
            graduated_by=current_user.id,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(data=result, message="Student graduated successfully")
