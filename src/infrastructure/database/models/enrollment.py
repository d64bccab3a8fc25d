# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record model.

One row per stay of a student in a classroom. A row is opened by an
enrollment or a transfer and closed exactly once by a transfer, an
explicit end, or graduation. Closed rows are never reopened or deleted.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from src.infrastructure.database.models.base import (
    AuditMixin,
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.infrastructure.database.models.school import Classroom
from src.infrastructure.database.models.student import Student
from src.models.common import EnrollmentReason

WRITE_ONCE_FIELDS = ("student_id", "classroom_id", "school_id", "start_date")


class EnrollmentRecord(UUIDPrimaryKeyMixin, TimestampMixin, AuditMixin, Base):
    """A student's stay in a classroom.

    Attributes:
        student_id: Enrolled student. Write-once.
        classroom_id: Classroom the student sits in. Write-once.
        school_id: Owning school. Write-once.
        start_date: When the stay began. Write-once.
        end_date: When the stay ended. NULL while active.
        is_active: True while the stay is open.
        reason: ENROLLMENT or TRANSFER while open; the closing cause after.
    """

    __tablename__ = "enrollment_records"
    __table_args__ = (
        CheckConstraint(
            "is_active = (end_date IS NULL)",
            name="ck_enrollment_records_active_end_date",
        ),
        CheckConstraint(
            "reason IN ('ENROLLMENT', 'TRANSFER', 'GRADUATION', 'WITHDRAWAL')",
            name="ck_enrollment_records_reason",
        ),
        Index("ix_enrollment_records_student_active", "student_id", "is_active"),
        Index("ix_enrollment_records_classroom_active", "classroom_id", "is_active"),
        Index("ix_enrollment_records_school_active", "school_id", "is_active"),
        # At most one open stay per student
        Index(
            "uq_enrollment_records_one_active_per_student",
            "student_id",
            unique=True,
            postgresql_where=text("is_active"),
        ),
    )

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
    )
    classroom_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classrooms.id", ondelete="RESTRICT"),
        nullable=False,
    )
    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reason: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EnrollmentReason.ENROLLMENT.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    classroom: Mapped[Classroom] = relationship(Classroom, lazy="raise")
    student: Mapped[Student] = relationship(Student, lazy="raise")

    @validates(*WRITE_ONCE_FIELDS)
    def _validate_write_once(self, key: str, value: object) -> object:
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"{key} cannot be changed once set")
        return value

    def close(self, reason: EnrollmentReason, ended_at: datetime, ended_by: str) -> None:
        """Close the stay.

        Args:
            reason: Closing cause.
            ended_at: End timestamp.
            ended_by: Admin performing the change.

        Raises:
            ValueError: If the record is already closed.
        """
        if not self.is_active:
            raise ValueError("Enrollment record is already closed")
        self.is_active = False
        self.end_date = ended_at
        self.reason = reason.value
        self.updated_by = ended_by


Index(
    "ix_enrollment_records_student_start",
    EnrollmentRecord.student_id,
    EnrollmentRecord.start_date.desc(),
)
