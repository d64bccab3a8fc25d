# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student response models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import StudentStatus
from src.models.enrollment import EnrollmentRecordResponse


class StudentResponse(BaseModel):
    """Student details."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Student ID")
    school_id: str = Field(..., description="School ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str | None = Field(None, description="Email address")
    date_of_birth: date | None = Field(None, description="Date of birth")
    registration_number: str = Field(..., description="Registration number")
    status: StudentStatus = Field(..., description="Lifecycle status")
    updated_by: str | None = Field(None, description="Admin who last changed the student")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class GraduationResponse(BaseModel):
    """Result of graduating a student."""

    student: StudentResponse = Field(..., description="Graduated student")
    closed_enrollment: EnrollmentRecordResponse | None = Field(
        None, description="Enrollment closed by the graduation, if any"
    )
