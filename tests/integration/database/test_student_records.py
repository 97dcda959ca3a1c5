# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for student records against a real database."""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.domains.records import ConflictError, NotFoundError
from src.domains.student import StudentService
from src.infrastructure.database.models import Enrollment
from src.utils.datetime import ensure_utc

pytestmark = pytest.mark.integration


@pytest.fixture
def student_service(records_db_session):
    """Create student service bound to the test session."""
    return StudentService(records_db_session)


def student_data(user_id: str = "user-100", number: str = "S100") -> dict:
    return {
        "user_id": user_id,
        "student_number": number,
        "date_of_birth": date(2008, 5, 1),
    }


class TestCreateAndRead:
    """Tests for creating and reading students."""

    @pytest.mark.asyncio
    async def test_create_then_get(self, student_service, add_user) -> None:
        """Test a created student can be read back with its user."""
        await add_user("user-100", "Ada", "Lovelace")

        created = await student_service.create_student(student_data())
        fetched = await student_service.get_student_by_id(created.id)

        assert fetched is not None
        assert fetched.student_number == "S100"
        assert fetched.full_name == "Ada Lovelace"
        assert fetched.email == "ada@example.com"
        assert created.created_at == created.updated_at

    @pytest.mark.asyncio
    async def test_duplicate_student_number(self, student_service) -> None:
        """Test a second S100 is a conflict and the first is unchanged."""
        first = await student_service.create_student(student_data("user-1", "S100"))

        with pytest.raises(ConflictError) as exc_info:
            await student_service.create_student(student_data("user-2", "S100"))

        assert exc_info.value.field == "student_number"
        assert (await student_service.get_student_by_student_number("S100")).id == first.id
        assert len(await student_service.get_all_students()) == 1

    @pytest.mark.asyncio
    async def test_one_student_per_user(self, student_service) -> None:
        """Test a user cannot be linked to two students."""
        await student_service.create_student(student_data("user-1", "S100"))

        with pytest.raises(ConflictError) as exc_info:
            await student_service.create_student(student_data("user-1", "S101"))

        assert exc_info.value.field == "user_id"

    @pytest.mark.asyncio
    async def test_store_constraint_is_final_arbiter(
        self, student_service, monkeypatch
    ) -> None:
        """Test a duplicate that slips past the pre-check is still a conflict."""
        await student_service.create_student(student_data("user-1", "S100"))

        async def _no_precheck(*args, **kwargs):
            return False

        monkeypatch.setattr(student_service._repository, "exists", _no_precheck)

        with pytest.raises(ConflictError) as exc_info:
            await student_service.create_student(student_data("user-2", "S100"))

        assert exc_info.value.field == "student_number"

    @pytest.mark.asyncio
    async def test_store_rejects_duplicate_user_link(
        self, student_service, monkeypatch
    ) -> None:
        """Test a store rejection on the user link is reported on user_id."""
        first = await student_service.create_student(student_data("user-1", "S100"))

        async def _no_precheck(*args, **kwargs):
            return False

        monkeypatch.setattr(student_service._repository, "exists", _no_precheck)

        with pytest.raises(ConflictError) as exc_info:
            await student_service.create_student(student_data("user-1", "S200"))

        assert exc_info.value.field == "user_id"
        assert exc_info.value.value == "user-1"
        assert (await student_service.get_student_by_user_id("user-1")).id == first.id
        assert await student_service.get_student_by_student_number("S200") is None

    @pytest.mark.asyncio
    async def test_store_rejects_number_on_update(
        self, student_service, monkeypatch
    ) -> None:
        """Test a store rejection during update is reported on the number."""
        await student_service.create_student(student_data("user-1", "S100"))
        second = await student_service.create_student(student_data("user-2", "S200"))

        async def _no_precheck(*args, **kwargs):
            return False

        monkeypatch.setattr(student_service._repository, "exists", _no_precheck)

        with pytest.raises(ConflictError) as exc_info:
            await student_service.update_student(second.id, {"student_number": "S100"})

        assert exc_info.value.field == "student_number"
        assert (await student_service.get_student_by_id(second.id)).student_number == "S200"

    @pytest.mark.asyncio
    async def test_numbers_are_case_sensitive_and_trimmed(self, student_service) -> None:
        """Test lookups trim whitespace but keep case."""
        await student_service.create_student(student_data("user-1", " S100 "))

        assert await student_service.student_number_exists("S100") is True
        assert await student_service.student_number_exists("  S100") is True
        assert await student_service.student_number_exists("s100") is False
        assert await student_service.get_student_by_student_number("s100") is None

    @pytest.mark.asyncio
    async def test_lowercase_number_is_distinct(self, student_service) -> None:
        """Test s100 and S100 can both exist."""
        await student_service.create_student(student_data("user-1", "S100"))
        await student_service.create_student(student_data("user-2", "s100"))

        numbers = [s.student_number for s in await student_service.get_all_students()]

        assert sorted(numbers) == ["S100", "s100"]

    @pytest.mark.asyncio
    async def test_get_by_user_id(self, student_service) -> None:
        """Test lookup by user link."""
        created = await student_service.create_student(student_data("user-9", "S900"))

        assert (await student_service.get_student_by_user_id("user-9")).id == created.id
        assert await student_service.get_student_by_user_id("user-404") is None


class TestUpdate:
    """Tests for updating students."""

    @pytest.mark.asyncio
    async def test_partial_update(self, student_service) -> None:
        """Test only supplied fields change and updated_at advances."""
        created = await student_service.create_student(
            {**student_data(), "phone": "+1 555 0100", "address": "1 School Lane"}
        )

        updated = await student_service.update_student(created.id, {"phone": "+1 555 0199"})

        assert updated.phone == "+1 555 0199"
        assert updated.address == "1 School Lane"
        assert updated.student_number == "S100"
        assert ensure_utc(updated.updated_at) >= ensure_utc(created.updated_at)
        assert ensure_utc(updated.created_at) == ensure_utc(created.created_at)

    @pytest.mark.asyncio
    async def test_update_to_taken_number(self, student_service) -> None:
        """Test moving to another student's number is a conflict."""
        await student_service.create_student(student_data("user-1", "S100"))
        second = await student_service.create_student(student_data("user-2", "S200"))

        with pytest.raises(ConflictError):
            await student_service.update_student(second.id, {"student_number": "S100"})

    @pytest.mark.asyncio
    async def test_update_keeping_own_number(self, student_service) -> None:
        """Test re-submitting a student's own number is not a conflict."""
        created = await student_service.create_student(student_data())

        updated = await student_service.update_student(created.id, {"student_number": "S100"})

        assert updated.student_number == "S100"

    @pytest.mark.asyncio
    async def test_update_missing_student(self, student_service) -> None:
        """Test updating an absent student raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await student_service.update_student(str(uuid4()), {"phone": "1"})


class TestDelete:
    """Tests for deleting students."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, student_service) -> None:
        """Test the second delete reports False."""
        created = await student_service.create_student(student_data())

        assert await student_service.delete_student(created.id) is True
        assert await student_service.delete_student(created.id) is False
        assert await student_service.get_student_by_id(created.id) is None

    @pytest.mark.asyncio
    async def test_delete_removes_enrollments(
        self, student_service, records_db_session, add_course, add_enrollment
    ) -> None:
        """Test a student's enrollments are deleted with it."""
        student = await student_service.create_student(student_data())
        algebra = await add_course("MATH101", "Algebra")
        physics = await add_course("PHYS101", "Physics")
        await add_enrollment(student.id, algebra.id)
        await add_enrollment(student.id, physics.id)

        assert await student_service.get_student_enrollment_count(student.id) == 2

        await student_service.delete_student(student.id)

        remaining = await records_db_session.scalar(select(func.count()).select_from(Enrollment))
        assert remaining == 0

    @pytest.mark.asyncio
    async def test_number_reusable_after_delete(self, student_service) -> None:
        """Test a deleted student's number and user can be used again."""
        created = await student_service.create_student(student_data())
        await student_service.delete_student(created.id)

        recreated = await student_service.create_student(student_data())

        assert recreated.id != created.id
