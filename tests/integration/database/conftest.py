# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides database sessions, engines and seed helpers for testing. Tests run
against an in-memory SQLite database unless TEST_DATABASE_URL points at
another async database (for example a disposable PostgreSQL).
"""

import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.infrastructure.database.connection import (
    create_engine_for_url,
    create_schema,
    create_sessionmaker,
)
from src.infrastructure.database.models import (
    Base,
    Course,
    Enrollment,
    EnrollmentStatus,
    User,
)

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def records_db_url() -> str:
    """Get records database URL for tests."""
    return os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest_asyncio.fixture(scope="function")
async def records_db_engine(records_db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine with a fresh schema."""
    engine = create_engine_for_url(records_db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await create_schema(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def records_sessionmaker(records_db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create sessionmaker bound to the test engine."""
    return create_sessionmaker(records_db_engine)


@pytest_asyncio.fixture(scope="function")
async def records_db_session(
    records_sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for records database tests."""
    async with records_sessionmaker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def add_user(records_db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert a user into the directory."""

    async def _add(user_id: str, first_name: str, last_name: str) -> User:
        user = User(
            id=user_id,
            user_name=f"{first_name.lower()}.{last_name.lower()}",
            email=f"{first_name.lower()}@example.com",
            first_name=first_name,
            last_name=last_name,
        )
        records_db_session.add(user)
        await records_db_session.commit()
        return user

    return _add


@pytest.fixture
def add_course(records_db_session: AsyncSession) -> Callable[..., Awaitable[Course]]:
    """Insert a course, optionally instructed by a teacher."""

    async def _add(
        code: str,
        title: str,
        teacher_id: str | None = None,
        created_at: datetime = BASE_TIME,
    ) -> Course:
        course = Course(
            course_code=code,
            title=title,
            credits=3,
            teacher_id=teacher_id,
            max_enrollments=30,
            created_at=created_at,
            updated_at=created_at,
        )
        records_db_session.add(course)
        await records_db_session.commit()
        return course

    return _add


@pytest.fixture
def add_enrollment(records_db_session: AsyncSession) -> Callable[..., Awaitable[Enrollment]]:
    """Insert an enrollment."""

    async def _add(
        student_id: str,
        course_id: str,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
        grade: Decimal | None = None,
        created_at: datetime = BASE_TIME,
        completion_date: datetime | None = None,
    ) -> Enrollment:
        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            status=status,
            grade=grade,
            enrollment_date=created_at,
            completion_date=completion_date,
            created_at=created_at,
            updated_at=created_at,
        )
        records_db_session.add(enrollment)
        await records_db_session.commit()
        return enrollment

    return _add
