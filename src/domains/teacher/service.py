# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher service for managing teacher records.

This module provides the TeacherService class for:
- Teacher lookup by id, user account and employee number
- Teacher creation with unique employee number and user link
- Partial updates and deletion

Courses are not owned by the teacher who instructs them. Deleting a
teacher never deletes courses; depending on RecordsSettings the courses
are either kept without an instructor (orphan, the default) or the
deletion is refused while any remain (restrict).
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import RecordsSettings
from src.domains.records import (
    DeletePolicy,
    DependentRelation,
    RecordService,
    RecordSpec,
)
from src.infrastructure.database.models import Teacher
from src.infrastructure.database.repository import CourseRepository, TeacherRepository
from src.models.teacher import TeacherCreateRequest, TeacherResponse, TeacherUpdateRequest

logger = logging.getLogger(__name__)


def teacher_records(course_policy: DeletePolicy = DeletePolicy.ORPHAN) -> RecordSpec:
    """Build the teacher record configuration for a course delete policy.

    Raises:
        ValueError: If course_policy is CASCADE; courses outlive their teacher.
    """
    if course_policy is DeletePolicy.CASCADE:
        raise ValueError("Deleting a teacher must not delete courses")

    return RecordSpec(
        entity_name="Teacher",
        unique_key="employee_number",
        create_model=TeacherCreateRequest,
        update_model=TeacherUpdateRequest,
        defaults_to_now=("hire_date",),
        dependents=(
            DependentRelation(
                name="courses",
                repository_factory=CourseRepository,
                foreign_key="teacher_id",
                policy=course_policy,
            ),
        ),
    )


class TeacherService:
    """Service for managing teacher records.

    Attributes:
        _db: Async database session.
        _records: Unique-checked CRUD configured for teachers.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: RecordsSettings | None = None,
        repository: TeacherRepository | None = None,
    ) -> None:
        """Initialize teacher service.

        Args:
            db: Async database session.
            settings: Record policies; defaults to orphaning courses.
            repository: Teacher repository, built on db when not given.
        """
        self._db = db
        settings = settings or RecordsSettings()
        self.course_policy = DeletePolicy(settings.teacher_course_policy)
        self._repository = repository or TeacherRepository(db)
        self._records: RecordService[Teacher] = RecordService(
            self._repository,
            teacher_records(self.course_policy),
        )

    async def get_all_teachers(self) -> list[TeacherResponse]:
        """List all teachers, ordered by employee number."""
        teachers = await self._records.list_all()
        return [self._to_response(t) for t in teachers]

    async def get_teacher_by_id(self, teacher_id: Any) -> TeacherResponse | None:
        """Get a teacher by id, or None."""
        teacher = await self._records.get(teacher_id)
        return self._to_response(teacher) if teacher else None

    async def get_teacher_by_user_id(self, user_id: str) -> TeacherResponse | None:
        """Get the teacher record linked to a user account."""
        teacher = await self._records.get_by_user_id(user_id)
        return self._to_response(teacher) if teacher else None

    async def get_teacher_by_employee_number(self, employee_number: str) -> TeacherResponse | None:
        """Get a teacher by exact (trimmed, case-sensitive) employee number."""
        teacher = await self._records.get_by_key(employee_number)
        return self._to_response(teacher) if teacher else None

    async def create_teacher(
        self,
        request: TeacherCreateRequest | Mapping[str, Any],
    ) -> TeacherResponse:
        """Create a teacher.

        Raises:
            ValidationError: If required fields are missing.
            ConflictError: If the employee number is taken or the user
                already has a teacher record.
        """
        teacher = await self._records.create(request)
        return self._to_response(teacher)

    async def update_teacher(
        self,
        teacher_id: Any,
        request: TeacherUpdateRequest | Mapping[str, Any],
    ) -> TeacherResponse | None:
        """Update the supplied fields of a teacher.

        Returns:
            The updated teacher, or None if it was deleted concurrently.

        Raises:
            ValidationError: If the patch is malformed.
            NotFoundError: If the teacher does not exist.
            ConflictError: If the new employee number belongs to another teacher.
        """
        teacher = await self._records.update(teacher_id, request)
        return self._to_response(teacher) if teacher else None

    async def delete_teacher(self, teacher_id: Any) -> bool:
        """Delete a teacher, leaving the teacher's courses in place.

        Returns:
            True if deleted, False if no such teacher.

        Raises:
            ConflictError: If the restrict policy is active and the teacher
                still instructs courses.
        """
        return await self._records.delete(teacher_id)

    async def employee_number_exists(self, employee_number: str) -> bool:
        """Check whether an employee number is already in use."""
        return await self._records.key_exists(employee_number)

    async def get_teacher_course_count(self, teacher_id: Any) -> int | None:
        """Count the courses a teacher instructs.

        Returns:
            Number of courses, or None if no such teacher.
        """
        teacher = await self._records.get(teacher_id)
        if teacher is None:
            return None
        courses = await self._repository.courses_for_teacher(teacher.id)
        return len(courses)

    def _to_response(self, teacher: Teacher) -> TeacherResponse:
        """Convert a teacher model to its response DTO."""
        response = TeacherResponse.model_validate(teacher)
        user = teacher.user
        if user is not None:
            response.full_name = user.full_name
            response.email = user.email
        return response
