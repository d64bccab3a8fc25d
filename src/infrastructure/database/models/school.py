# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School (tenant) and classroom models."""

from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    AuditMixin,
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.models.common import ClassroomStatus


class School(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A school. Every tenant-owned row references one."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Classroom(UUIDPrimaryKeyMixin, TimestampMixin, AuditMixin, Base):
    """A classroom within one school.

    capacity bounds the number of active enrollment records that may
    reference the classroom at the same time.
    """

    __tablename__ = "classrooms"
    __table_args__ = (
        CheckConstraint("capacity >= 1 AND capacity <= 100", name="ck_classrooms_capacity"),
        CheckConstraint("status IN ('ACTIVE', 'ARCHIVED')", name="ck_classrooms_status"),
        Index("ix_classrooms_school_status", "school_id", "status"),
    )

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    class_teacher: Mapped[str | None] = mapped_column(String(255), nullable=True)
    resources: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ClassroomStatus.ACTIVE.value,
    )

    @property
    def is_archived(self) -> bool:
        """Check if the classroom no longer accepts students."""
        return self.status == ClassroomStatus.ARCHIVED.value
