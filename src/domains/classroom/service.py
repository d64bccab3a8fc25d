# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Classroom service.

This module provides the ClassroomService class for:
- Classroom lookups scoped to a school (used by the enrollment ledger)
- Classroom rosters
- Classroom archiving
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, DomainError
from src.domains.enrollment.exceptions import ClassroomNotFoundError
from src.domains.enrollment.responses import to_roster_response
from src.domains.enrollment.service import EnrollmentLedger
from src.infrastructure.database.models import Classroom
from src.models.classroom import ClassroomResponse
from src.models.common import ClassroomStatus
from src.models.enrollment import ClassroomRosterResponse

logger = logging.getLogger(__name__)


class ClassroomAlreadyArchivedError(ConflictError):
    """Raised when archiving a classroom that is already archived."""

    def __init__(self, message: str = "Classroom is already archived") -> None:
        super().__init__(message)


class ClassroomHasActiveStudentsError(ConflictError):
    """Raised when archiving a classroom that still seats students."""

    def __init__(self, active_count: int) -> None:
        super().__init__(
            f"Cannot archive classroom with {active_count} active student(s)",
            {"active_count": active_count},
        )


class ClassroomService:
    """Service for classroom operations.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_id(
        self,
        classroom_id: str,
        school_id: str,
        *,
        for_update: bool = False,
    ) -> Classroom | None:
        """Find a classroom of the given school.

        Args:
            classroom_id: Classroom identifier.
            school_id: School the classroom must belong to.
            for_update: Lock the row until the transaction ends.

        Returns:
            The classroom, or None if absent or in another school.
        """
        query = select(Classroom).where(
            Classroom.id == classroom_id,
            Classroom.school_id == school_id,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_classroom(self, classroom_id: str, school_id: str) -> Classroom:
        """Get a classroom of the given school.

        Raises:
            ClassroomNotFoundError: If not found.
        """
        classroom = await self.find_by_id(classroom_id, school_id)
        if classroom is None:
            raise ClassroomNotFoundError()
        return classroom

    async def get_roster(self, classroom_id: str, school_id: str) -> ClassroomRosterResponse:
        """Get the students currently seated in a classroom.

        Args:
            classroom_id: Classroom identifier.
            school_id: Caller's school.

        Returns:
            Roster with classroom summary, oldest enrollment first.

        Raises:
            ClassroomNotFoundError: If the classroom is not in the school.
        """
        classroom = await self.get_classroom(classroom_id, school_id)
        records = await self._ledger().roster(school_id, classroom_id)
        return to_roster_response(classroom, records)

    async def archive_classroom(
        self,
        classroom_id: str,
        school_id: str,
        archived_by: str,
    ) -> ClassroomResponse:
        """Archive a classroom that seats no students.

        Args:
            classroom_id: Classroom identifier.
            school_id: Caller's school.
            archived_by: Admin archiving the classroom.

        Returns:
            The archived classroom.

        Raises:
            ClassroomNotFoundError: If the classroom is not in the school.
            ClassroomAlreadyArchivedError: If already archived.
            ClassroomHasActiveStudentsError: If students are still enrolled.
        """
        try:
            # Locked so no placement can slip in between the count and the update
            classroom = await self.find_by_id(classroom_id, school_id, for_update=True)
            if classroom is None:
                raise ClassroomNotFoundError()
            if classroom.is_archived:
                raise ClassroomAlreadyArchivedError()

            active = await self._ledger().active_count(school_id, classroom_id)
            if active > 0:
                raise ClassroomHasActiveStudentsError(active)

            classroom.status = ClassroomStatus.ARCHIVED.value
            classroom.updated_by = archived_by
            await self.db.commit()
        except DomainError:
            await self.db.rollback()
            raise
        except Exception:
            await self.db.rollback()
            logger.exception("Failed to archive classroom %s", classroom_id)
            raise

        logger.info(
            "Archived classroom: classroom=%s, school=%s, by=%s",
            classroom_id,
            school_id,
            archived_by,
        )

        return ClassroomResponse.model_validate(classroom)

    def _ledger(self) -> EnrollmentLedger:
        from src.domains.student.service import StudentService

        return EnrollmentLedger(self.db, students=StudentService(self.db), classrooms=self)
