# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process lifecycle wiring for the records services.

Call startup() once when the process starts and shutdown() when it stops.
Each unit of work (one request, one job) opens its own service_scope(),
which binds the services to a fresh session.

Example:
    >>> await startup()
    >>> async with service_scope() as services:
    ...     student = await services.students.get_student_by_student_number("S100")
    ...     stats = await services.dashboard.get_dashboard_stats()
    >>> await shutdown()
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator
from uuid import uuid4

from src.core.config import Settings, get_settings
from src.domains.dashboard import DashboardService
from src.domains.student import StudentService
from src.domains.teacher import TeacherService
from src.infrastructure.database.connection import (
    close_database,
    create_schema,
    get_session,
    init_database,
)
from src.utils.logging import bind_context, reset_context, setup_logging

logger = logging.getLogger(__name__)

_settings: Settings | None = None


@dataclass(frozen=True)
class RecordServices:
    """Services bound to one session."""

    students: StudentService
    teachers: TeacherService
    dashboard: DashboardService


async def startup(settings: Settings | None = None, *, create_tables: bool = False) -> Settings:
    """Configure logging and open the database connection pool.

    Args:
        settings: Settings to use. Defaults to get_settings().
        create_tables: Create missing tables (local development and tests).

    Returns:
        The settings in effect.

    Raises:
        DatabaseError: If the engine cannot be created.
    """
    global _settings

    settings = settings or get_settings()
    setup_logging(settings)
    await init_database(settings)
    if create_tables:
        await create_schema()
    _settings = settings

    logger.info(
        "Records services started (environment=%s, teacher_course_policy=%s)",
        settings.environment,
        settings.records.teacher_course_policy,
    )
    return settings


async def shutdown() -> None:
    """Close the database connection pool."""
    global _settings

    await close_database()
    _settings = None
    logger.info("Records services stopped")


@asynccontextmanager
async def service_scope() -> AsyncIterator[RecordServices]:
    """Open a unit of work and yield services bound to its session.

    Log records emitted inside the scope carry a ``unit_of_work`` id.

    Raises:
        DatabaseError: If startup() has not been called.
    """
    settings = _settings or get_settings()
    tokens = bind_context(unit_of_work=uuid4().hex[:12])
    try:
        async with get_session() as session:
            yield RecordServices(
                students=StudentService(session),
                teachers=TeacherService(session, settings=settings.records),
                dashboard=DashboardService(session, settings=settings.dashboard),
            )
    finally:
        reset_context(tokens)
