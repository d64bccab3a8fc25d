# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated admins
- Resolve the school a request acts on

Example:
    @router.get("/classrooms/{classroom_id}/roster")
    async def get_roster(
        db: DB,
        current_user: AdminUser,
        school_id: SchoolId,
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import CurrentUser, get_current_user
from src.api.middleware.tenant import SCHOOL_HEADER, get_school_id_from_request
from src.infrastructure.database.connection import get_session
from src.infrastructure.database.models import School
from src.models.common import UserRole

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession committed after the endpoint returns.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated admin.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require a super admin or school admin.

    Raises:
        HTTPException: 401 if not authenticated, 403 for any other role.
    """
    user = require_auth(request)
    if not user.has_any_role(UserRole.SUPER_ADMIN.value, UserRole.SCHOOL_ADMIN.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_school_admin(request: Request) -> CurrentUser:
    """Require a school admin.

    Raises:
        HTTPException: 401 if not authenticated, 403 for any other role.
    """
    user = require_auth(request)
    if not user.is_school_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="School admin access required",
        )
    return user


# =========================================================================
# School Dependencies
# =========================================================================


async def require_school(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> str:
    """Resolve and verify the school the request acts on.

    Args:
        request: HTTP request with school resolved by TenantMiddleware.
        db: Database session.

    Returns:
        School ID.

    Raises:
        HTTPException: 400 if a super admin omitted or malformed the
            X-School-Id header, 404 if the school does not exist.
    """
    user = require_auth(request)
    school_id = get_school_id_from_request(request)

    if not school_id:
        if user.is_super_admin:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{SCHOOL_HEADER} header is required",
            )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="School not found for the authenticated user",
        )

    try:
        UUID(school_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {SCHOOL_HEADER} header",
        )

    result = await db.execute(
        select(School.id).where(School.id == school_id, School.is_active.is_(True))
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="School not found for the authenticated user",
        )

    return school_id


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
SchoolAdminUser = Annotated[CurrentUser, Depends(require_school_admin)]
SchoolId = Annotated[str, Depends(require_school)]
