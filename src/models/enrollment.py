# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.models.common import ClassroomStatus, EnrollmentReason


class EnrollStudentRequest(BaseModel):
    """Request to enroll a student into a classroom."""

    classroom_id: UUID = Field(..., description="Target classroom ID")


class TransferStudentRequest(BaseModel):
    """Request to move a student to another classroom."""

    new_classroom_id: UUID = Field(..., description="Target classroom ID")


class ClassroomSummary(BaseModel):
    """Classroom fields shown next to an enrollment record."""

    id: str = Field(..., description="Classroom ID")
    name: str = Field(..., description="Classroom name")
    grade: str = Field(..., description="Grade")
    capacity: int = Field(..., description="Seat capacity")
    status: ClassroomStatus = Field(..., description="Classroom status")


class EnrollmentRecordResponse(BaseModel):
    """A single enrollment record."""

    id: str = Field(..., description="Enrollment record ID")
    student_id: str = Field(..., description="Student ID")
    classroom_id: str = Field(..., description="Classroom ID")
    school_id: str = Field(..., description="School ID")
    start_date: datetime = Field(..., description="When the stay began")
    end_date: datetime | None = Field(None, description="When the stay ended")
    is_active: bool = Field(..., description="Whether the stay is open")
    reason: EnrollmentReason = Field(..., description="Opening or closing cause")
    notes: str | None = Field(None, description="Free-form notes")
    created_by: str = Field(..., description="Admin who opened the record")
    updated_by: str | None = Field(None, description="Admin who last changed the record")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    classroom: ClassroomSummary | None = Field(None, description="Classroom summary")


class EnrollmentHistoryResponse(BaseModel):
    """A student's enrollment records, newest first."""

    student_id: str = Field(..., description="Student ID")
    total: int = Field(..., description="Number of records")
    items: list[EnrollmentRecordResponse] = Field(..., description="Records")


class RosterEntry(BaseModel):
    """A student currently seated in a classroom."""

    enrollment_id: str = Field(..., description="Active enrollment record ID")
    student_id: str = Field(..., description="Student ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    registration_number: str = Field(..., description="Registration number")
    enrolled_at: datetime = Field(..., description="Start of the active stay")


class ClassroomRosterResponse(BaseModel):
    """Active students of a classroom, longest-seated first."""

    classroom_id: str = Field(..., description="Classroom ID")
    classroom_name: str = Field(..., description="Classroom name")
    capacity: int = Field(..., description="Seat capacity")
    total_students: int = Field(..., description="Number of active students")
    students: list[RosterEntry] = Field(..., description="Roster")
