# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repository contract over an async SQLAlchemy session.

Repositories are the only place the record services touch SQL. They give
lookup by id and by unique field, insert, update, delete, listing and
relationship traversal, and they translate store failures:

- unique constraint violations become IntegrityConflictError (after the
  session has been rolled back), so services can report a conflict;
- every other SQLAlchemyError becomes DatabaseError, which services let
  propagate untouched.

Example:
    >>> repo = StudentRepository(session)
    >>> student = await repo.find_by_unique("student_number", "S001")
    >>> enrollments = await repo.enrollments_for_student(student.id)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import ColumnElement

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import (
    Base,
    Course,
    Enrollment,
    EnrollmentStatus,
    Student,
    Teacher,
)

ModelT = TypeVar("ModelT", bound=Base)


class IntegrityConflictError(DatabaseError):
    """Raised when the store rejects a write on a uniqueness constraint.

    This is the conflict signal of the store: it is the final arbiter when
    two writers race past the services' pre-checks.

    Attributes:
        constraint: Name or target of the violated constraint as reported by
            the driver ("uq_students_user_id", "students.user_id"), never
            the SQL statement.
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        constraint: str = "",
    ) -> None:
        super().__init__(message, original_error)
        self.constraint = constraint


def violated_constraint(error: IntegrityError) -> str:
    """Identify the constraint a DBAPI integrity error refers to.

    asyncpg and psycopg expose the constraint name directly. SQLite only
    reports it in the message ("UNIQUE constraint failed: students.user_id").
    Only the driver error is inspected; the wrapping SQLAlchemy error also
    carries the statement, which names every inserted column.
    """
    orig = error.orig
    for source in (orig, getattr(orig, "__cause__", None)):
        if source is None:
            continue
        diag = getattr(source, "diag", None)
        name = getattr(diag, "constraint_name", None) or getattr(source, "constraint_name", None)
        if isinstance(name, str) and name:
            return name

    message = str(orig) if orig is not None else ""
    _, found, target = message.partition("constraint failed:")
    if found:
        return target.strip()
    return message.splitlines()[0] if message else ""


class Repository(Generic[ModelT]):
    """Generic async repository for one mapped model.

    Attributes:
        model: Mapped class handled by this repository.
        default_order: Columns used to order list() results.
    """

    model: type[ModelT]
    default_order: tuple[Any, ...] = ()

    def __init__(self, db: AsyncSession, model: type[ModelT] | None = None) -> None:
        """Initialize the repository.

        Args:
            db: Async database session (one unit of work).
            model: Mapped class, when not fixed by a subclass.
        """
        self._db = db
        if model is not None:
            self.model = model

    @property
    def db(self) -> AsyncSession:
        """Session this repository runs on."""
        return self._db

    def column(self, field_name: str) -> Any:
        """Resolve a mapped column attribute by name.

        Raises:
            ValueError: If the model has no such column.
        """
        if field_name not in self.model.__table__.columns:
            raise ValueError(f"{self.model.__name__} has no column '{field_name}'")
        return getattr(self.model, field_name)

    def _conflict(self, error: IntegrityError) -> IntegrityConflictError:
        return IntegrityConflictError(
            f"{self.model.__name__} violates a uniqueness constraint",
            error,
            constraint=violated_constraint(error),
        )

    async def _execute(self, stmt: Any) -> Any:
        try:
            return await self._db.execute(stmt)
        except IntegrityError as e:
            await self._db.rollback()
            raise self._conflict(e) from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"{self.model.__name__} query failed", e) from e

    async def find_by_id(self, record_id: str, *, refresh: bool = False) -> ModelT | None:
        """Get a record by primary key.

        Args:
            record_id: Record identifier.
            refresh: Overwrite any stale copy held by the session.

        Returns:
            The record, or None if absent.
        """
        stmt = select(self.model).where(self.model.id == record_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_unique(self, field_name: str, value: Any) -> ModelT | None:
        """Get the record holding a unique value."""
        stmt = select(self.model).where(self.column(field_name) == value)
        result = await self._execute(stmt)
        return result.scalars().first()

    async def find_all_by(self, field_name: str, value: Any) -> list[ModelT]:
        """Get every record whose column equals value, oldest first."""
        stmt = (
            select(self.model)
            .where(self.column(field_name) == value)
            .order_by(self.model.created_at.asc())
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def list(self, *order_by: Any) -> list[ModelT]:
        """Get all records.

        Args:
            *order_by: Ordering columns, defaulting to default_order.
        """
        stmt = select(self.model).order_by(*(order_by or self.default_order))
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count records matching optional criteria."""
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        result = await self._execute(stmt)
        return result.scalar_one()

    async def exists(
        self,
        field_name: str,
        value: Any,
        exclude_id: str | None = None,
    ) -> bool:
        """Check whether any record holds value in field_name.

        Args:
            field_name: Column to test.
            value: Value to look for.
            exclude_id: Record to ignore (the one being updated).
        """
        stmt = select(self.model.id).where(self.column(field_name) == value)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        result = await self._execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def insert(self, entity: ModelT) -> ModelT:
        """Stage and flush a new record.

        Returns:
            The flushed record with generated values and eager relationships loaded.

        Raises:
            IntegrityConflictError: If a unique constraint rejects the row.
            DatabaseError: On any other store failure.
        """
        self._db.add(entity)
        try:
            await self._db.flush()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._conflict(e) from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to insert {self.model.__name__}", e) from e
        return await self.find_by_id(entity.id, refresh=True) or entity

    async def update(self, record_id: str, values: dict[str, Any]) -> ModelT | None:
        """Update one record in place.

        The UPDATE is keyed on the primary key; if the row no longer exists
        nothing is written and None is returned.

        Returns:
            The reloaded record, or None if the row vanished.
        """
        stmt = (
            update(self.model)
            .where(self.model.id == record_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.find_by_id(record_id, refresh=True)

    async def delete(self, record_id: str) -> bool:
        """Delete one record by primary key.

        Returns:
            True if a row was deleted.
        """
        stmt = delete(self.model).where(self.model.id == record_id)
        result = await self._execute(stmt)
        return result.rowcount > 0

    async def update_where(self, field_name: str, value: Any, values: dict[str, Any]) -> int:
        """Update every record whose column equals value.

        Returns:
            Number of rows updated.
        """
        stmt = (
            update(self.model)
            .where(self.column(field_name) == value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        return result.rowcount

    async def delete_where(self, field_name: str, value: Any) -> int:
        """Delete every record whose column equals value.

        Returns:
            Number of rows deleted.
        """
        stmt = delete(self.model).where(self.column(field_name) == value)
        result = await self._execute(stmt)
        return result.rowcount

    async def commit(self) -> None:
        """Commit the unit of work.

        Raises:
            IntegrityConflictError: If a unique constraint rejects the commit.
            DatabaseError: On any other store failure.
        """
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._conflict(e) from e
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise DatabaseError("Commit failed", e) from e

    async def rollback(self) -> None:
        """Roll back the unit of work."""
        await self._db.rollback()


class StudentRepository(Repository[Student]):
    """Students, with traversal to their enrollments."""

    model = Student
    default_order = (Student.student_number.asc(),)

    async def enrollments_for_student(self, student_id: str) -> list[Enrollment]:
        """Get the enrollments owned by a student."""
        return await EnrollmentRepository(self._db).find_all_by("student_id", student_id)


class TeacherRepository(Repository[Teacher]):
    """Teachers, with traversal to the courses they instruct."""

    model = Teacher
    default_order = (Teacher.employee_number.asc(),)

    async def courses_for_teacher(self, teacher_id: str) -> list[Course]:
        """Get the courses instructed by a teacher."""
        return await CourseRepository(self._db).find_all_by("teacher_id", teacher_id)


class CourseRepository(Repository[Course]):
    """Courses."""

    model = Course
    default_order = (Course.course_code.asc(),)

    async def most_recent(self, limit: int) -> list[Course]:
        """Get the newest courses with their instructor's user loaded."""
        if limit <= 0:
            return []
        stmt = (
            select(Course)
            .options(selectinload(Course.teacher))
            .order_by(Course.created_at.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())


class EnrollmentRepository(Repository[Enrollment]):
    """Enrollments, with the aggregate queries used by the dashboard."""

    model = Enrollment
    default_order = (Enrollment.created_at.asc(),)

    def _with_names(self) -> Sequence[Any]:
        return (
            selectinload(Enrollment.student),
            selectinload(Enrollment.course),
        )

    async def count_by_status(self) -> dict[EnrollmentStatus, int]:
        """Count enrollments per status. Statuses with no rows are omitted."""
        stmt = select(Enrollment.status, func.count()).group_by(Enrollment.status)
        result = await self._execute(stmt)
        return {EnrollmentStatus(status): count for status, count in result.all()}

    async def average_completed_grade(self) -> Decimal | float | None:
        """Mean grade over completed enrollments that carry a grade.

        Returns:
            The mean, or None when no completed enrollment is graded.
        """
        stmt = select(func.avg(Enrollment.grade)).where(
            Enrollment.status == EnrollmentStatus.COMPLETED,
            Enrollment.grade.is_not(None),
        )
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def most_recent(self, limit: int) -> list[Enrollment]:
        """Get the newest enrollments with student and course loaded."""
        if limit <= 0:
            return []
        stmt = (
            select(Enrollment)
            .options(*self._with_names())
            .order_by(Enrollment.created_at.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def most_recent_completions(self, limit: int) -> list[Enrollment]:
        """Get the latest completed enrollments that have a completion date."""
        if limit <= 0:
            return []
        stmt = (
            select(Enrollment)
            .options(*self._with_names())
            .where(
                Enrollment.status == EnrollmentStatus.COMPLETED,
                Enrollment.completion_date.is_not(None),
            )
            .order_by(Enrollment.completion_date.desc(), Enrollment.created_at.desc())
            .limit(limit)
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())
