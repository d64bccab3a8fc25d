# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints backed by the enrollment ledger:
- POST /students/{student_id}/enrollments - Enroll a student
- PUT /students/{student_id}/enrollments/transfer - Transfer a student
- PATCH /enrollments/{enrollment_id}/end - End an enrollment
- GET /students/{student_id}/enrollments/current - Current enrollment
- GET /students/{student_id}/enrollments - Enrollment history

Mutations require a school admin. Reads are open to super admins too,
who pick the school with the X-School-Id header.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DB, AdminUser, SchoolAdminUser, SchoolId
from src.api.errors import to_http_exception
from src.core.config import get_settings
from src.core.errors import DomainError
from src.domains.classroom.service import ClassroomService
from src.domains.enrollment.responses import to_history_response, to_record_response
from src.domains.enrollment.service import EnrollmentLedger
from src.domains.student.service import StudentService
from src.models.common import ApiResponse
from src.models.enrollment import (
    EnrollmentHistoryResponse,
    EnrollmentRecordResponse,
    EnrollStudentRequest,
    TransferStudentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_ledger(db: AsyncSession) -> EnrollmentLedger:
    """Get an enrollment ledger bound to the request session."""
    return EnrollmentLedger(
        db=db,
        students=StudentService(db),
        classrooms=ClassroomService(db),
        settings=get_settings().ledger,
    )


@router.post(
    "/students/{student_id}/enrollments",
    response_model=ApiResponse[EnrollmentRecordResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student into a classroom. Requires school admin access.",
)
async def enroll_student(
    student_id: UUID,
    data: EnrollStudentRequest,
    current_user: SchoolAdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[EnrollmentRecordResponse]:
    """Enroll a student into a classroom.

    Args:
        student_id: Student identifier.
        data: Target classroom.
        current_user: Authenticated school admin.
        school_id: Admin's school.
        db: Database session.

    Returns:
        The new active enrollment record.

    Raises:
        HTTPException: 404 if student/classroom not found, 409 on
            capacity, archived classroom or existing enrollment.
    """
    ledger = _get_ledger(db)

    try:
        record = await ledger.enroll(
            school_id=school_id,
            student_id=str(student_id),
            classroom_id=str(data.classroom_id),
            enrolled_by=current_user.id,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(
        code=status.HTTP_201_CREATED,
        data=to_record_response(record),
        message="Student enrolled successfully",
    )


@router.put(
    "/students/{student_id}/enrollments/transfer",
    response_model=ApiResponse[EnrollmentRecordResponse],
    summary="Transfer student",
    description="Move a student to another classroom. Requires school admin access.",
)
async def transfer_student(
    student_id: UUID,
    data: TransferStudentRequest,
    current_user: SchoolAdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[EnrollmentRecordResponse]:
    """Transfer a student to another classroom.

    Args:
        student_id: Student identifier.
        data: Target classroom.
        current_user: Authenticated school admin.
        school_id: Admin's school.
        db: Database session.

    Returns:
        The new active enrollment record.

    Raises:
        HTTPException: 400 if the student has no active enrollment, 404 if
            student/classroom not found, 409 on capacity, archived target
            or same classroom.
    """
    ledger = _get_ledger(db)

    try:
        record = await ledger.transfer(
            school_id=school_id,
            student_id=str(student_id),
            new_classroom_id=str(data.new_classroom_id),
            transferred_by=current_user.id,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(
        data=to_record_response(record),
        message="Student transferred successfully",
    )


@router.patch(
    "/enrollments/{enrollment_id}/end",
    response_model=ApiResponse[EnrollmentRecordResponse],
    summary="End enrollment",
    description="Close an active enrollment. Requires school admin access.",
)
async def end_enrollment(
    enrollment_id: UUID,
    current_user: SchoolAdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[EnrollmentRecordResponse]:
    """End an enrollment.

    Raises:
        HTTPException: 404 if the record is not found or already ended.
    """
    ledger = _get_ledger(db)

    try:
        record = await ledger.end_enrollment(
            school_id=school_id,
            enrollment_id=str(enrollment_id),
            ended_by=current_user.id,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(
        data=to_record_response(record),
        message="Enrollment ended successfully",
    )


@router.get(
    "/students/{student_id}/enrollments/current",
    response_model=ApiResponse[EnrollmentRecordResponse],
    summary="Current enrollment",
    description="Get the student's active enrollment with its classroom.",
)
async def get_current_enrollment(
    student_id: UUID,
    current_user: AdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[EnrollmentRecordResponse]:
    """Get the student's active enrollment.

    Raises:
        HTTPException: 404 if the student is not found or has no active
            enrollment.
    """
    ledger = _get_ledger(db)

    try:
        await StudentService(db).get_student(str(student_id), school_id)
        record = await ledger.current_enrollment(school_id, str(student_id))
    except DomainError as e:
        raise to_http_exception(e)

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student has no active enrollment",
        )

    return ApiResponse(
        data=to_record_response(record),
        message="Current enrollment retrieved successfully",
    )


@router.get(
    "/students/{student_id}/enrollments",
    response_model=ApiResponse[EnrollmentHistoryResponse],
    summary="Enrollment history",
    description="List every enrollment of the student, newest first.",
)
async def get_enrollment_history(
    student_id: UUID,
    current_user: AdminUser,
    school_id: SchoolId,
    db: DB,
) -> ApiResponse[EnrollmentHistoryResponse]:
    """Get the student's enrollment history.

    Raises:
        HTTPException: 404 if the student is not found.
    """
    ledger = _get_ledger(db)

    try:
        await StudentService(db).get_student(str(student_id), school_id)
        records = await ledger.history(school_id, str(student_id))
    except DomainError as e:
        raise to_http_exception(e)

    return ApiResponse(
        data=to_history_response(str(student_id), records),
        message="Enrollment history retrieved successfully",
    )
