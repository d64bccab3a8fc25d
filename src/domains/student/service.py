# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service.

This module provides the StudentService class for:
- Student lookups scoped to a school (used by the enrollment ledger)
- Graduation, which closes the active enrollment and marks the student
  GRADUATED in one transaction
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, DomainError
from src.domains.classroom.service import ClassroomService
from src.domains.enrollment.exceptions import StudentNotFoundError
from src.domains.enrollment.responses import to_record_response
from src.domains.enrollment.service import EnrollmentLedger
from src.infrastructure.database.models import Student
from src.models.common import StudentStatus
from src.models.student import GraduationResponse, StudentResponse

logger = logging.getLogger(__name__)


class StudentAlreadyGraduatedError(ConflictError):
    """Raised when graduating a student who has already graduated."""

    def __init__(self, message: str = "Student is already graduated") -> None:
        super().__init__(message)


class StudentNotGraduatableError(ConflictError):
    """Raised when the student's status does not allow graduation."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Cannot graduate student with status: {status}", {"status": status})


class StudentService:
    """Service for student operations.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_id(
        self,
        student_id: str,
        school_id: str,
        *,
        for_update: bool = False,
    ) -> Student | None:
        """Find a student of the given school in any status.

        Args:
            student_id: Student identifier.
            school_id: School the student must belong to.
            for_update: Lock the row until the transaction ends.

        Returns:
            The student, or None if absent or in another school.
        """
        query = select(Student).where(
            Student.id == student_id,
            Student.school_id == school_id,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_active_by_id(
        self,
        student_id: str,
        school_id: str,
        *,
        for_update: bool = False,
    ) -> Student | None:
        """Find an ACTIVE student of the given school."""
        query = select(Student).where(
            Student.id == student_id,
            Student.school_id == school_id,
            Student.status == StudentStatus.ACTIVE.value,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_student(self, student_id: str, school_id: str) -> Student:
        """Get a student of the given school in any status.

        Raises:
            StudentNotFoundError: If not found.
        """
        student = await self.find_by_id(student_id, school_id)
        if student is None:
            raise StudentNotFoundError()
        return student

    async def graduate_student(
        self,
        student_id: str,
        school_id: str,
        graduated_by: str,
    ) -> GraduationResponse:
        """Graduate a student.

        Closes the active enrollment (if any) with reason GRADUATION and
        sets the student's status to GRADUATED. Both changes commit
        together or not at all.

        Args:
            student_id: Student identifier.
            school_id: Caller's school.
            graduated_by: Admin performing the graduation.

        Returns:
            The graduated student and the closed enrollment.

        Raises:
            StudentNotFoundError: If the student is not in the school.
            StudentAlreadyGraduatedError: If already graduated.
            StudentNotGraduatableError: If the student is not ACTIVE.
        """
        ledger = EnrollmentLedger(self.db, students=self, classrooms=ClassroomService(self.db))

        try:
            student = await self.find_by_id(student_id, school_id, for_update=True)
            if student is None:
                raise StudentNotFoundError()
            if student.status == StudentStatus.GRADUATED.value:
                raise StudentAlreadyGraduatedError()
            if student.status != StudentStatus.ACTIVE.value:
                raise StudentNotGraduatableError(student.status)

            closed = await ledger.graduate_cascade(
                self.db, school_id, student_id, graduated_by
            )

            student.status = StudentStatus.GRADUATED.value
            student.updated_by = graduated_by
            await self.db.commit()
        except DomainError:
            await self.db.rollback()
            raise
        except Exception:
            await self.db.rollback()
            logger.exception("Failed to graduate student %s", student_id)
            raise

        logger.info(
            "Graduated student: student=%s, school=%s, closed_enrollment=%s, by=%s",
            student_id,
            school_id,
            closed.id if closed else None,
            graduated_by,
        )

        return GraduationResponse(
            student=StudentResponse.model_validate(student),
            closed_enrollment=to_record_response(closed) if closed else None,
        )
