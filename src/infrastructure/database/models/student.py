# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student model."""

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    AuditMixin,
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.models.common import StudentStatus


class Student(UUIDPrimaryKeyMixin, TimestampMixin, AuditMixin, Base):
    """A student. Belongs to exactly one school."""

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint(
            "status IN ('ACTIVE', 'TRANSFERRED', 'GRADUATED', 'INACTIVE')",
            name="ck_students_status",
        ),
        Index("ix_students_school_status", "school_id", "status"),
    )

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    registration_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StudentStatus.ACTIVE.value,
    )

    @property
    def full_name(self) -> str:
        """First and last name joined."""
        return f"{self.first_name} {self.last_name}".strip()
