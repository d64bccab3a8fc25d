# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment ledger.

This module provides the EnrollmentLedger class, the only writer of
enrollment records. It covers:
- Enrolling a student into a classroom under its capacity
- Transferring a student between classrooms in one transaction
- Ending an enrollment explicitly
- Closing the active enrollment as part of a graduation
- Roster, history and active-count queries

Mutations lock the student row and then the classroom row (FOR UPDATE)
before counting seats, so concurrent requests against one classroom or
one student serialize in the database. A partial unique index on
enrollment_records(student_id) WHERE is_active backs this up.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import LedgerSettings, get_settings
from src.core.errors import DomainError
from src.domains.enrollment.exceptions import (
    AlreadyEnrolledElsewhereError,
    AlreadyEnrolledError,
    ClassroomArchivedError,
    ClassroomFullError,
    ClassroomNotFoundError,
    ConcurrentEnrollmentError,
    EnrollmentNotFoundError,
    InvalidIdentifierError,
    LedgerTransactionError,
    MissingIdentifierError,
    NoActiveEnrollmentError,
    SameClassroomTransferError,
    StudentNotFoundError,
)
from src.infrastructure.database.models import Classroom, EnrollmentRecord, Student
from src.models.common import EnrollmentReason
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})


class StudentStore(Protocol):
    """Student lookups the ledger depends on."""

    async def find_active_by_id(
        self, student_id: str, school_id: str, *, for_update: bool = False
    ) -> Student | None: ...

    async def find_by_id(
        self, student_id: str, school_id: str, *, for_update: bool = False
    ) -> Student | None: ...


class ClassroomStore(Protocol):
    """Classroom lookups the ledger depends on."""

    async def find_by_id(
        self, classroom_id: str, school_id: str, *, for_update: bool = False
    ) -> Classroom | None: ...


def sqlstate_of(error: DBAPIError) -> str | None:
    """Extract the PostgreSQL SQLSTATE from a wrapped driver error."""
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def _require(**identifiers: str | None) -> tuple[str, ...]:
    """Check identifiers are present and return them in canonical UUID form.

    PostgreSQL matches uuid values regardless of case; identifiers compared
    in Python are the lowercase text the database returns.
    """
    for name, value in identifiers.items():
        if not value:
            raise MissingIdentifierError(name)

    canonical = []
    for name, value in identifiers.items():
        try:
            canonical.append(str(UUID(str(value))))
        except ValueError as e:
            raise InvalidIdentifierError(name) from e
    return tuple(canonical)


class EnrollmentLedger:
    """Authoritative record of which student sits in which classroom.

    Attributes:
        db: Async database session. Mutations commit it.
        students: Student lookups.
        classrooms: Classroom lookups.
        settings: Retry policy for transient database failures.
    """

    def __init__(
        self,
        db: AsyncSession,
        students: StudentStore,
        classrooms: ClassroomStore,
        settings: LedgerSettings | None = None,
    ) -> None:
        self.db = db
        self.students = students
        self.classrooms = classrooms
        self.settings = settings or get_settings().ledger

    # =========================================================================
    # Mutations
    # =========================================================================

    async def enroll(
        self,
        school_id: str,
        student_id: str,
        classroom_id: str,
        enrolled_by: str,
    ) -> EnrollmentRecord:
        """Place a student with no active enrollment into a classroom.

        Args:
            school_id: Caller's school.
            student_id: Student to enroll.
            classroom_id: Target classroom.
            enrolled_by: Admin performing the enrollment.

        Returns:
            The new active enrollment record, classroom loaded.

        Raises:
            MissingIdentifierError: If an identifier is empty.
            InvalidIdentifierError: If an identifier is not a UUID.
            StudentNotFoundError: If no ACTIVE student matches in the school.
            ClassroomNotFoundError: If the classroom is not in the school.
            ClassroomArchivedError: If the classroom is archived.
            ClassroomFullError: If the classroom has no free seat.
            AlreadyEnrolledError: If the student already sits in this classroom.
            AlreadyEnrolledElsewhereError: If the student sits in another classroom.
        """
        school_id, student_id, classroom_id = _require(
            school_id=school_id, student_id=student_id, classroom_id=classroom_id
        )

        async def operation() -> EnrollmentRecord:
            student = await self._lock_student(student_id, school_id)
            classroom = await self._lock_placeable_classroom(classroom_id, school_id)

            current = await self._find_active_record(school_id, student_id)
            if current is not None:
                if current.classroom_id == classroom_id:
                    raise AlreadyEnrolledError()
                raise AlreadyEnrolledElsewhereError()

            record = self._open_record(
                student, classroom, EnrollmentReason.ENROLLMENT, enrolled_by
            )
            await self.db.flush()
            return record

        record = await self._run_atomic("enroll student", operation)

        logger.info(
            "Enrolled student: student=%s, classroom=%s, school=%s, by=%s",
            student_id,
            classroom_id,
            school_id,
            enrolled_by,
        )
        return record

    async def transfer(
        self,
        school_id: str,
        student_id: str,
        new_classroom_id: str,
        transferred_by: str,
    ) -> EnrollmentRecord:
        """Move a student from their current classroom to another.

        The current record is closed and the new one opened in the same
        transaction; either both persist or neither does.

        Args:
            school_id: Caller's school.
            student_id: Student to move.
            new_classroom_id: Target classroom.
            transferred_by: Admin performing the transfer.

        Returns:
            The new active enrollment record, classroom loaded.

        Raises:
            MissingIdentifierError: If an identifier is empty.
            InvalidIdentifierError: If an identifier is not a UUID.
            StudentNotFoundError: If no ACTIVE student matches in the school.
            ClassroomNotFoundError: If the target is not in the school.
            ClassroomArchivedError: If the target is archived.
            ClassroomFullError: If the target has no free seat.
            NoActiveEnrollmentError: If the student has no active record.
            SameClassroomTransferError: If the target is the current classroom.
        """
        school_id, student_id, new_classroom_id = _require(
            school_id=school_id,
            student_id=student_id,
            new_classroom_id=new_classroom_id,
        )

        async def operation() -> tuple[EnrollmentRecord, str]:
            student = await self._lock_student(student_id, school_id)
            classroom = await self._lock_placeable_classroom(
                new_classroom_id,
                school_id,
                not_found="New classroom not found in this school",
                target=True,
            )

            current = await self._find_active_record(school_id, student_id)
            if current is None:
                raise NoActiveEnrollmentError()
            if current.classroom_id == new_classroom_id:
                raise SameClassroomTransferError()

            previous_classroom_id = current.classroom_id
            current.close(EnrollmentReason.TRANSFER, utc_now(), transferred_by)
            # The closing UPDATE must reach the database before the INSERT
            await self.db.flush()

            record = self._open_record(
                student, classroom, EnrollmentReason.TRANSFER, transferred_by
            )
            await self.db.flush()
            return record, previous_classroom_id

        record, previous_classroom_id = await self._run_atomic("transfer student", operation)

        logger.info(
            "Transferred student: student=%s, from=%s, to=%s, school=%s, by=%s",
            student_id,
            previous_classroom_id,
            new_classroom_id,
            school_id,
            transferred_by,
        )
        return record

    async def end_enrollment(
        self,
        school_id: str,
        enrollment_id: str,
        ended_by: str,
    ) -> EnrollmentRecord:
        """Close an active enrollment record without opening another.

        Args:
            school_id: Caller's school.
            enrollment_id: Record to close.
            ended_by: Admin ending the enrollment.

        Returns:
            The closed record.

        Raises:
            MissingIdentifierError: If an identifier is empty.
            InvalidIdentifierError: If an identifier is not a UUID.
            EnrollmentNotFoundError: If the record is not in the school or
                is already closed.
        """
        school_id, enrollment_id = _require(school_id=school_id, enrollment_id=enrollment_id)

        async def operation() -> EnrollmentRecord:
            result = await self.db.execute(
                select(EnrollmentRecord)
                .where(
                    EnrollmentRecord.id == enrollment_id,
                    EnrollmentRecord.school_id == school_id,
                )
                .with_for_update()
            )
            record = result.scalar_one_or_none()
            if record is None or not record.is_active:
                raise EnrollmentNotFoundError()

            record.close(EnrollmentReason.WITHDRAWAL, utc_now(), ended_by)
            await self.db.flush()
            return record

        record = await self._run_atomic("end enrollment", operation)

        logger.info(
            "Ended enrollment: enrollment=%s, student=%s, classroom=%s, school=%s, by=%s",
            enrollment_id,
            record.student_id,
            record.classroom_id,
            school_id,
            ended_by,
        )
        return record

    async def graduate_cascade(
        self,
        uow: AsyncSession,
        school_id: str,
        student_id: str,
        graduated_by: str | None = None,
    ) -> EnrollmentRecord | None:
        """Close the student's active record as part of a graduation.

        Runs inside the caller's unit of work. Flushes but never commits,
        so the record change lands together with the caller's own changes
        or not at all.

        Args:
            uow: Session of the caller's open transaction.
            school_id: Caller's school.
            student_id: Graduating student.
            graduated_by: Admin performing the graduation.

        Returns:
            The closed record, or None if the student had no active record.
        """
        result = await uow.execute(
            select(EnrollmentRecord)
            .where(
                EnrollmentRecord.student_id == student_id,
                EnrollmentRecord.school_id == school_id,
                EnrollmentRecord.is_active.is_(True),
            )
            .with_for_update()
        )
        record = result.scalar_one_or_none()
        if record is None:
            logger.debug("No active enrollment to close for student %s", student_id)
            return None

        record.close(EnrollmentReason.GRADUATION, utc_now(), graduated_by)
        await uow.flush()

        logger.info(
            "Closed enrollment on graduation: student=%s, classroom=%s, school=%s",
            student_id,
            record.classroom_id,
            school_id,
        )
        return record

    # =========================================================================
    # Queries
    # =========================================================================

    async def current_enrollment(
        self,
        school_id: str,
        student_id: str,
    ) -> EnrollmentRecord | None:
        """Get the student's active record with its classroom loaded."""
        result = await self.db.execute(
            select(EnrollmentRecord)
            .where(
                EnrollmentRecord.student_id == student_id,
                EnrollmentRecord.school_id == school_id,
                EnrollmentRecord.is_active.is_(True),
            )
            .options(selectinload(EnrollmentRecord.classroom))
        )
        return result.scalar_one_or_none()

    async def history(self, school_id: str, student_id: str) -> list[EnrollmentRecord]:
        """Get every record of the student, newest first."""
        result = await self.db.execute(
            select(EnrollmentRecord)
            .where(
                EnrollmentRecord.student_id == student_id,
                EnrollmentRecord.school_id == school_id,
            )
            .options(selectinload(EnrollmentRecord.classroom))
            .order_by(
                EnrollmentRecord.start_date.desc(),
                EnrollmentRecord.created_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def roster(self, school_id: str, classroom_id: str) -> list[EnrollmentRecord]:
        """Get the classroom's active records with students loaded, oldest first."""
        result = await self.db.execute(
            select(EnrollmentRecord)
            .where(
                EnrollmentRecord.classroom_id == classroom_id,
                EnrollmentRecord.school_id == school_id,
                EnrollmentRecord.is_active.is_(True),
            )
            .options(selectinload(EnrollmentRecord.student))
            .order_by(
                EnrollmentRecord.start_date.asc(),
                EnrollmentRecord.created_at.asc(),
            )
        )
        return list(result.scalars().all())

    async def active_count(self, school_id: str, classroom_id: str) -> int:
        """Count active records in a classroom.

        This is the single seat count used by capacity checks and by
        classroom archiving.
        """
        result = await self.db.execute(
            select(func.count(EnrollmentRecord.id)).where(
                EnrollmentRecord.classroom_id == classroom_id,
                EnrollmentRecord.school_id == school_id,
                EnrollmentRecord.is_active.is_(True),
            )
        )
        return result.scalar_one()

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _lock_student(self, student_id: str, school_id: str) -> Student:
        student = await self.students.find_active_by_id(
            student_id, school_id, for_update=True
        )
        if student is None:
            raise StudentNotFoundError()
        return student

    async def _lock_placeable_classroom(
        self,
        classroom_id: str,
        school_id: str,
        *,
        not_found: str = "Classroom not found in this school",
        target: bool = False,
    ) -> Classroom:
        """Lock the classroom and check it can take one more student."""
        classroom = await self.classrooms.find_by_id(classroom_id, school_id, for_update=True)
        if classroom is None:
            raise ClassroomNotFoundError(not_found)
        if classroom.is_archived:
            raise ClassroomArchivedError()

        # Counted after the row lock so concurrent placements see each other
        seated = await self.active_count(school_id, classroom_id)
        if seated >= classroom.capacity:
            raise ClassroomFullError(classroom.capacity, target=target)
        return classroom

    async def _find_active_record(
        self,
        school_id: str,
        student_id: str,
    ) -> EnrollmentRecord | None:
        result = await self.db.execute(
            select(EnrollmentRecord)
            .where(
                EnrollmentRecord.student_id == student_id,
                EnrollmentRecord.school_id == school_id,
                EnrollmentRecord.is_active.is_(True),
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    def _open_record(
        self,
        student: Student,
        classroom: Classroom,
        reason: EnrollmentReason,
        actor: str,
    ) -> EnrollmentRecord:
        record = EnrollmentRecord(
            student_id=student.id,
            classroom_id=classroom.id,
            school_id=classroom.school_id,
            start_date=utc_now(),
            end_date=None,
            is_active=True,
            reason=reason.value,
            created_by=actor,
        )
        record.classroom = classroom
        self.db.add(record)
        return record

    async def _run_atomic(self, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation in a transaction and commit it.

        Domain errors roll back and propagate. A lost uniqueness race
        becomes ConcurrentEnrollmentError. Serialization failures,
        deadlocks and lock timeouts are retried with linear backoff.
        Anything else from the database becomes LedgerTransactionError.
        """
        attempts = self.settings.transaction_attempts
        for attempt in range(1, attempts + 1):
            try:
                result = await operation()
                await self.db.commit()
                return result
            except DomainError:
                await self.db.rollback()
                raise
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning("Failed to %s: constraint violated: %s", action, e.orig)
                raise ConcurrentEnrollmentError() from e
            except DBAPIError as e:
                await self.db.rollback()
                code = sqlstate_of(e)
                if code in RETRYABLE_SQLSTATES and attempt < attempts:
                    logger.warning(
                        "Retrying %s after sqlstate %s (attempt %d/%d)",
                        action,
                        code,
                        attempt,
                        attempts,
                    )
                    await asyncio.sleep(self.settings.retry_backoff_ms * attempt / 1000)
                    continue
                logger.exception("Failed to %s", action)
                raise LedgerTransactionError(f"Failed to {action}") from e
            except Exception:
                await self.db.rollback()
                raise

        raise LedgerTransactionError(f"Failed to {action}")
