# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Conversion of ledger records to response DTOs."""

from src.infrastructure.database.models import Classroom, EnrollmentRecord
from src.models.enrollment import (
    ClassroomRosterResponse,
    ClassroomSummary,
    EnrollmentHistoryResponse,
    EnrollmentRecordResponse,
    RosterEntry,
)


def to_classroom_summary(classroom: Classroom) -> ClassroomSummary:
    """Convert a classroom to the summary shown next to records."""
    return ClassroomSummary(
        id=classroom.id,
        name=classroom.name,
        grade=classroom.grade,
        capacity=classroom.capacity,
        status=classroom.status,
    )


def to_record_response(record: EnrollmentRecord) -> EnrollmentRecordResponse:
    """Convert an enrollment record to its response DTO.

    The classroom summary is included only when the relationship was
    loaded with the record.
    """
    classroom = record.__dict__.get("classroom")
    return EnrollmentRecordResponse(
        id=record.id,
        student_id=record.student_id,
        classroom_id=record.classroom_id,
        school_id=record.school_id,
        start_date=record.start_date,
        end_date=record.end_date,
        is_active=record.is_active,
        reason=record.reason,
        notes=record.notes,
        created_by=record.created_by,
        updated_by=record.updated_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
        classroom=to_classroom_summary(classroom) if classroom is not None else None,
    )


def to_history_response(
    student_id: str,
    records: list[EnrollmentRecord],
) -> EnrollmentHistoryResponse:
    """Convert a student's records to the history DTO."""
    return EnrollmentHistoryResponse(
        student_id=student_id,
        total=len(records),
        items=[to_record_response(r) for r in records],
    )


def to_roster_response(
    classroom: Classroom,
    records: list[EnrollmentRecord],
) -> ClassroomRosterResponse:
    """Convert a classroom's active records to the roster DTO."""
    return ClassroomRosterResponse(
        classroom_id=classroom.id,
        classroom_name=classroom.name,
        capacity=classroom.capacity,
        total_students=len(records),
        students=[
            RosterEntry(
                enrollment_id=r.id,
                student_id=r.student_id,
                first_name=r.student.first_name,
                last_name=r.student.last_name,
                registration_number=r.student.registration_number,
                enrolled_at=r.start_date,
            )
            for r in records
        ],
    )
