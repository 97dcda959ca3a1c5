# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for managing student records.

This module provides the StudentService class for:
- Student lookup by id, user account and student number
- Student creation with unique student number and user link
- Partial updates and deletion (enrollments are deleted with the student)

Example:
    >>> service = StudentService(db)
    >>> student = await service.create_student(
    ...     StudentCreateRequest(user_id="u1", student_number="S001", date_of_birth=date(2008, 5, 1))
    ... )
    >>> await service.student_number_exists("S001")
    True
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.records import (
    DeletePolicy,
    DependentRelation,
    RecordService,
    RecordSpec,
)
from src.infrastructure.database.models import Student
from src.infrastructure.database.repository import EnrollmentRepository, StudentRepository
from src.models.student import StudentCreateRequest, StudentResponse, StudentUpdateRequest

logger = logging.getLogger(__name__)

STUDENT_RECORDS = RecordSpec(
    entity_name="Student",
    unique_key="student_number",
    create_model=StudentCreateRequest,
    update_model=StudentUpdateRequest,
    defaults_to_now=("enrollment_date",),
    dependents=(
        DependentRelation(
            name="enrollments",
            repository_factory=EnrollmentRepository,
            foreign_key="student_id",
            policy=DeletePolicy.CASCADE,
        ),
    ),
)


class StudentService:
    """Service for managing student records.

    Attributes:
        _db: Async database session.
        _records: Unique-checked CRUD configured for students.
    """

    def __init__(
        self,
        db: AsyncSession,
        repository: StudentRepository | None = None,
    ) -> None:
        """Initialize student service.

        Args:
            db: Async database session.
            repository: Student repository, built on db when not given.
        """
        self._db = db
        self._repository = repository or StudentRepository(db)
        self._records: RecordService[Student] = RecordService(self._repository, STUDENT_RECORDS)

    async def get_all_students(self) -> list[StudentResponse]:
        """List all students, ordered by student number."""
        students = await self._records.list_all()
        return [self._to_response(s) for s in students]

    async def get_student_by_id(self, student_id: Any) -> StudentResponse | None:
        """Get a student by id.

        Returns:
            The student, or None if no student has that id.
        """
        student = await self._records.get(student_id)
        return self._to_response(student) if student else None

    async def get_student_by_user_id(self, user_id: str) -> StudentResponse | None:
        """Get the student record linked to a user account."""
        student = await self._records.get_by_user_id(user_id)
        return self._to_response(student) if student else None

    async def get_student_by_student_number(self, student_number: str) -> StudentResponse | None:
        """Get a student by exact (trimmed, case-sensitive) student number."""
        student = await self._records.get_by_key(student_number)
        return self._to_response(student) if student else None

    async def create_student(
        self,
        request: StudentCreateRequest | Mapping[str, Any],
    ) -> StudentResponse:
        """Create a student.

        Args:
            request: Student data.

        Returns:
            The created student.

        Raises:
            ValidationError: If required fields are missing.
            ConflictError: If the student number is taken or the user
                already has a student record.
        """
        student = await self._records.create(request)
        return self._to_response(student)

    async def update_student(
        self,
        student_id: Any,
        request: StudentUpdateRequest | Mapping[str, Any],
    ) -> StudentResponse | None:
        """Update the supplied fields of a student.

        Returns:
            The updated student, or None if it was deleted concurrently.

        Raises:
            ValidationError: If the patch is malformed.
            NotFoundError: If the student does not exist.
            ConflictError: If the new student number belongs to another student.
        """
        student = await self._records.update(student_id, request)
        return self._to_response(student) if student else None

    async def delete_student(self, student_id: Any) -> bool:
        """Delete a student together with its enrollments.

        Returns:
            True if deleted, False if no such student.
        """
        return await self._records.delete(student_id)

    async def student_number_exists(self, student_number: str) -> bool:
        """Check whether a student number is already in use."""
        return await self._records.key_exists(student_number)

    async def get_student_enrollment_count(self, student_id: Any) -> int | None:
        """Count the enrollments a student owns.

        Returns:
            Number of enrollments, or None if no such student.
        """
        student = await self._records.get(student_id)
        if student is None:
            return None
        enrollments = await self._repository.enrollments_for_student(student.id)
        return len(enrollments)

    def _to_response(self, student: Student) -> StudentResponse:
        """Convert a student model to its response DTO."""
        response = StudentResponse.model_validate(student)
        user = student.user
        if user is not None:
            response.full_name = user.full_name
            response.email = user.email
        return response
