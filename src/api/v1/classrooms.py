# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Classroom API endpoints.

- GET /classrooms/{classroom_id}/roster - Students currently enrolled
- PATCH /classrooms/{classroom_id}/archive - Archive an empty classroom

Requires school admin or super admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DB, AdminUser, SchoolId
from src.api.errors import to_http_exception
from src.core.errors import DomainError
from src.domains.classroom.service import ClassroomService
from src.models.classroom import ClassroomResponse
from src.models.common import ApiResponse
from src.models.enrollment import ClassroomRosterResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> ClassroomService:
    """Get classroom service instance."""
    return ClassroomService(db=db)


@router.get(
    "/classrooms/{classroom_id}/roster",
    response_model=ApiResponse[ClassroomRosterResponse],
    summary="Classroom roster",
    description="List the students currently enrolled, longest-seated first.",
)
async def get_roster(
    classroom_id: UUID,
    current_user: AdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[ClassroomRosterResponse]:
    """Get a classroom's roster.

    Raises:
        HTTPException: 404 if the classroom is not in the school.
    """
    service = _get_service(db)

    try:
        roster = await service.get_roster(str(classroom_id), school_id)
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(data=roster, message="Classroom roster retrieved successfully")


@router.patch(
    "/classrooms/{classroom_id}/archive",
    response_model=ApiResponse[ClassroomResponse],
    summary="Archive classroom",
    description="Archive a classroom with no active students.",
)
async def archive_classroom(
    classroom_id: UUID,
    current_user: AdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[ClassroomResponse]:
    """Archive a classroom.

    Raises:
        HTTPException: 404 if the classroom is not in the school, 409 if
            already archived or students are still enrolled.
    """
    service = _get_service(db)

    try:
        classroom = await service.archive_classroom(
            classroom_id=str(classroom_id),
            school_id=school_id,
            archived_by=current_user.id,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(data=classroom, message="Classroom archived successfully")
