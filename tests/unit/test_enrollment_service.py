# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment ledger."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError

from factories import make_classroom, make_record, make_result, make_student
from src.core.errors import BadRequestError, ConflictError, NotFoundError, ServerError
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
from src.domains.enrollment.service import EnrollmentLedger, sqlstate_of
from src.infrastructure.database.models import EnrollmentRecord


class FakePgError(Exception):
    """Driver error carrying a SQLSTATE."""

    def __init__(self, sqlstate: str) -> None:
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


def db_error(sqlstate: str) -> DBAPIError:
    return DBAPIError("SELECT 1", {}, FakePgError(sqlstate))


@pytest.fixture
def school_id():
    return str(uuid4())


@pytest.fixture
def admin_id():
    return str(uuid4())


@pytest.fixture
def student(school_id):
    return make_student(school_id)


@pytest.fixture
def classroom(school_id):
    return make_classroom(school_id, capacity=2)


@pytest.fixture
def other_classroom(school_id):
    return make_classroom(school_id, capacity=2, name="Class 5B")


@pytest.fixture
def student_store(student):
    store = MagicMock()
    store.find_active_by_id = AsyncMock(return_value=student)
    store.find_by_id = AsyncMock(return_value=student)
    return store


@pytest.fixture
def classroom_store(classroom):
    store = MagicMock()
    store.find_by_id = AsyncMock(return_value=classroom)
    return store


@pytest.fixture
def ledger(mock_db, student_store, classroom_store, ledger_settings):
    return EnrollmentLedger(
        db=mock_db,
        students=student_store,
        classrooms=classroom_store,
        settings=ledger_settings,
    )


class TestEnroll:
    """Tests for enrolling a student."""

    @pytest.mark.asyncio
    async def test_enroll_success(self, ledger, mock_db, school_id, student, classroom, admin_id):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)]

        record = await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert isinstance(record, EnrollmentRecord)
        assert record.student_id == student.id
        assert record.classroom_id == classroom.id
        assert record.school_id == school_id
        assert record.is_active is True
        assert record.end_date is None
        assert record.reason == "ENROLLMENT"
        assert record.created_by == admin_id
        mock_db.add.assert_called_once_with(record)
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_locks_student_then_classroom(
        self, ledger, mock_db, student_store, classroom_store, school_id, student, classroom, admin_id
    ):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)]

        await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        student_store.find_active_by_id.assert_awaited_once_with(
            student.id, school_id, for_update=True
        )
        classroom_store.find_by_id.assert_awaited_once_with(
            classroom.id, school_id, for_update=True
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["school_id", "student_id", "classroom_id"])
    async def test_enroll_missing_identifier(self, ledger, mock_db, field, admin_id):
        ids = {name: str(uuid4()) for name in ("school_id", "student_id", "classroom_id")}
        ids[field] = ""

        with pytest.raises(MissingIdentifierError) as exc_info:
            await ledger.enroll(enrolled_by=admin_id, **ids)

        assert isinstance(exc_info.value, BadRequestError)
        assert field in exc_info.value.message
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_student_not_found(
        self, ledger, mock_db, student_store, school_id, classroom, admin_id
    ):
        student_store.find_active_by_id.return_value = None

        with pytest.raises(StudentNotFoundError) as exc_info:
            await ledger.enroll(school_id, str(uuid4()), classroom.id, admin_id)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.message == "Student not found in this school"
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_classroom_not_found(
        self, ledger, mock_db, classroom_store, school_id, student, admin_id
    ):
        classroom_store.find_by_id.return_value = None

        with pytest.raises(ClassroomNotFoundError):
            await ledger.enroll(school_id, student.id, str(uuid4()), admin_id)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_enroll_archived_classroom(
        self, ledger, mock_db, classroom_store, school_id, student, admin_id
    ):
        archived = make_classroom(school_id, status="ARCHIVED")
        classroom_store.find_by_id.return_value = archived

        with pytest.raises(ClassroomArchivedError) as exc_info:
            await ledger.enroll(school_id, student.id, archived.id, admin_id)

        assert isinstance(exc_info.value, ConflictError)
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_classroom_full(self, ledger, mock_db, school_id, student, classroom, admin_id):
        mock_db.execute.side_effect = [make_result(count=classroom.capacity)]

        with pytest.raises(ClassroomFullError) as exc_info:
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert exc_info.value.message == "Classroom is at full capacity (2 students)"
        mock_db.add.assert_not_called()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enroll_already_in_classroom(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        current = make_record(student, classroom)
        mock_db.execute.side_effect = [make_result(count=1), make_result(current)]

        with pytest.raises(AlreadyEnrolledError):
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_enroll_uppercase_id_of_current_classroom(
        self, ledger, mock_db, classroom_store, school_id, student, classroom, admin_id
    ):
        current = make_record(student, classroom)
        mock_db.execute.side_effect = [make_result(count=1), make_result(current)]

        with pytest.raises(AlreadyEnrolledError):
            await ledger.enroll(
                school_id.upper(), student.id.upper(), classroom.id.upper(), admin_id
            )

        classroom_store.find_by_id.assert_awaited_once_with(
            classroom.id, school_id, for_update=True
        )
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["school_id", "student_id", "classroom_id"])
    async def test_enroll_malformed_identifier(self, ledger, mock_db, field, admin_id):
        ids = {name: str(uuid4()) for name in ("school_id", "student_id", "classroom_id")}
        ids[field] = "not-a-uuid"

        with pytest.raises(InvalidIdentifierError) as exc_info:
            await ledger.enroll(enrolled_by=admin_id, **ids)

        assert isinstance(exc_info.value, BadRequestError)
        assert exc_info.value.details == {"field": field}
        mock_db.execute.assert_not_awaited()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_already_elsewhere(
        self, ledger, mock_db, school_id, student, classroom, other_classroom, admin_id
    ):
        current = make_record(student, other_classroom)
        mock_db.execute.side_effect = [make_result(count=0), make_result(current)]

        with pytest.raises(AlreadyEnrolledElsewhereError) as exc_info:
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert isinstance(exc_info.value, ConflictError)
        assert current.is_active is True


class TestTransfer:
    """Tests for transferring a student."""

    @pytest.mark.asyncio
    async def test_transfer_success(
        self, ledger, mock_db, classroom_store, school_id, student, classroom, other_classroom, admin_id
    ):
        current = make_record(student, classroom)
        classroom_store.find_by_id.return_value = other_classroom
        mock_db.execute.side_effect = [make_result(count=0), make_result(current)]

        record = await ledger.transfer(school_id, student.id, other_classroom.id, admin_id)

        assert current.is_active is False
        assert current.end_date is not None
        assert current.reason == "TRANSFER"
        assert current.updated_by == admin_id
        assert record.classroom_id == other_classroom.id
        assert record.is_active is True
        assert record.reason == "TRANSFER"
        assert mock_db.flush.await_count == 2
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_transfer_target_not_found(
        self, ledger, classroom_store, school_id, student, admin_id
    ):
        classroom_store.find_by_id.return_value = None

        with pytest.raises(ClassroomNotFoundError) as exc_info:
            await ledger.transfer(school_id, student.id, str(uuid4()), admin_id)

        assert exc_info.value.message == "New classroom not found in this school"

    @pytest.mark.asyncio
    async def test_transfer_target_full(
        self, ledger, mock_db, classroom_store, school_id, student, other_classroom, admin_id
    ):
        classroom_store.find_by_id.return_value = other_classroom
        mock_db.execute.side_effect = [make_result(count=2)]

        with pytest.raises(ClassroomFullError) as exc_info:
            await ledger.transfer(school_id, student.id, other_classroom.id, admin_id)

        assert exc_info.value.message.startswith("Target classroom is at full capacity")

    @pytest.mark.asyncio
    async def test_transfer_without_active_enrollment(
        self, ledger, mock_db, classroom_store, school_id, student, other_classroom, admin_id
    ):
        classroom_store.find_by_id.return_value = other_classroom
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)]

        with pytest.raises(NoActiveEnrollmentError) as exc_info:
            await ledger.transfer(school_id, student.id, other_classroom.id, admin_id)

        assert isinstance(exc_info.value, BadRequestError)

    @pytest.mark.asyncio
    async def test_transfer_to_same_classroom(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        current = make_record(student, classroom)
        mock_db.execute.side_effect = [make_result(count=1), make_result(current)]

        with pytest.raises(SameClassroomTransferError) as exc_info:
            await ledger.transfer(school_id, student.id, classroom.id, admin_id)

        assert isinstance(exc_info.value, ConflictError)
        assert current.is_active is True
        assert current.end_date is None
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_transfer_to_same_classroom_uppercase_id(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        current = make_record(student, classroom)
        mock_db.execute.side_effect = [make_result(count=1), make_result(current)]

        with pytest.raises(SameClassroomTransferError):
            await ledger.transfer(school_id, student.id, classroom.id.upper(), admin_id)

        assert current.is_active is True
        assert current.end_date is None
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transfer_malformed_classroom_id(self, ledger, mock_db, school_id, student, admin_id):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            await ledger.transfer(school_id, student.id, "classroom-5b", admin_id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "new_classroom_id is not a valid identifier"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transfer_capacity_checked_before_active_record(
        self, ledger, mock_db, classroom_store, school_id, student, other_classroom, admin_id
    ):
        """A full target wins over a missing active record."""
        classroom_store.find_by_id.return_value = other_classroom
        mock_db.execute.side_effect = [make_result(count=2), make_result(None)]

        with pytest.raises(ClassroomFullError):
            await ledger.transfer(school_id, student.id, other_classroom.id, admin_id)


class TestEndEnrollment:
    """Tests for ending an enrollment."""

    @pytest.mark.asyncio
    async def test_end_enrollment_success(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        record = make_record(student, classroom)
        mock_db.execute.return_value = make_result(record)

        ended = await ledger.end_enrollment(school_id, record.id, admin_id)

        assert ended is record
        assert record.is_active is False
        assert record.end_date is not None
        assert record.reason == "WITHDRAWAL"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_end_enrollment_already_ended(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        record = make_record(student, classroom, is_active=False, reason="WITHDRAWAL")
        mock_db.execute.return_value = make_result(record)

        with pytest.raises(EnrollmentNotFoundError) as exc_info:
            await ledger.end_enrollment(school_id, record.id, admin_id)

        assert exc_info.value.message == "Enrollment not found or already ended"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_end_enrollment_not_found(self, ledger, mock_db, school_id, admin_id):
        mock_db.execute.return_value = make_result(None)

        with pytest.raises(EnrollmentNotFoundError):
            await ledger.end_enrollment(school_id, str(uuid4()), admin_id)

    @pytest.mark.asyncio
    async def test_end_enrollment_requires_id(self, ledger, school_id, admin_id):
        with pytest.raises(MissingIdentifierError):
            await ledger.end_enrollment(school_id, "", admin_id)

    @pytest.mark.asyncio
    async def test_end_enrollment_malformed_id(self, ledger, mock_db, school_id, admin_id):
        with pytest.raises(InvalidIdentifierError):
            await ledger.end_enrollment(school_id, "12345", admin_id)

        mock_db.execute.assert_not_awaited()
        mock_db.rollback.assert_not_awaited()


class TestGraduateCascade:
    """Tests for closing the active enrollment on graduation."""

    @pytest.mark.asyncio
    async def test_closes_active_record_without_commit(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        record = make_record(student, classroom)
        uow = AsyncMock()
        uow.execute.return_value = make_result(record)

        closed = await ledger.graduate_cascade(uow, school_id, student.id, admin_id)

        assert closed is record
        assert record.is_active is False
        assert record.reason == "GRADUATION"
        assert record.end_date is not None
        uow.flush.assert_awaited_once()
        uow.commit.assert_not_awaited()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_active_record(self, ledger, school_id, student):
        uow = AsyncMock()
        uow.execute.return_value = make_result(None)

        assert await ledger.graduate_cascade(uow, school_id, student.id) is None
        uow.flush.assert_not_awaited()


class TestQueries:
    """Tests for read operations."""

    @pytest.mark.asyncio
    async def test_active_count(self, ledger, mock_db, school_id, classroom):
        mock_db.execute.return_value = make_result(count=3)

        assert await ledger.active_count(school_id, classroom.id) == 3

    @pytest.mark.asyncio
    async def test_current_enrollment_none(self, ledger, mock_db, school_id, student):
        mock_db.execute.return_value = make_result(None)

        assert await ledger.current_enrollment(school_id, student.id) is None

    @pytest.mark.asyncio
    async def test_history_returns_list(self, ledger, mock_db, school_id, student, classroom):
        records = [make_record(student, classroom, days_ago=1), make_record(student, classroom, is_active=False)]
        mock_db.execute.return_value = make_result(items=records)

        assert await ledger.history(school_id, student.id) == records

    @pytest.mark.asyncio
    async def test_roster_returns_list(self, ledger, mock_db, school_id, student, classroom):
        records = [make_record(student, classroom)]
        mock_db.execute.return_value = make_result(items=records)

        assert await ledger.roster(school_id, classroom.id) == records


class TestTransactionPolicy:
    """Tests for commit, rollback and retry behavior."""

    @pytest.mark.asyncio
    async def test_retries_serialization_failure(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)] * 2
        mock_db.flush.side_effect = [db_error("40001"), None]

        record = await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert record.is_active is True
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_gives_up_after_configured_attempts(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)] * 3
        mock_db.flush.side_effect = db_error("40P01")

        with pytest.raises(LedgerTransactionError) as exc_info:
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert isinstance(exc_info.value, ServerError)
        assert mock_db.rollback.await_count == 3
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)]
        mock_db.flush.side_effect = IntegrityError("INSERT", {}, FakePgError("23505"))

        with pytest.raises(ConcurrentEnrollmentError) as exc_info:
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        assert isinstance(exc_info.value, ConflictError)
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_error_is_server_error(
        self, ledger, mock_db, school_id, student, classroom, admin_id
    ):
        mock_db.execute.side_effect = [make_result(count=0), make_result(None)]
        mock_db.commit.side_effect = db_error("08006")

        with pytest.raises(LedgerTransactionError):
            await ledger.enroll(school_id, student.id, classroom.id, admin_id)

        mock_db.rollback.assert_awaited_once()

    def test_sqlstate_of_reads_driver_error(self):
        assert sqlstate_of(db_error("55P03")) == "55P03"
        assert sqlstate_of(DBAPIError("SELECT 1", {}, Exception("boom"))) is None
