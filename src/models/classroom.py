# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Classroom response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import ClassroomStatus


class ClassroomResponse(BaseModel):
    """Classroom details."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Classroom ID")
    school_id: str = Field(..., description="School ID")
    name: str = Field(..., description="Classroom name")
    grade: str = Field(..., description="Grade")
    capacity: int = Field(..., description="Seat capacity")
    class_teacher: str | None = Field(None, description="Class teacher")
    resources: dict[str, Any] = Field(default_factory=dict, description="Resources")
    status: ClassroomStatus = Field(..., description="Lifecycle status")
    updated_by: str | None = Field(None, description="Admin who last changed the classroom")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
