# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the records store.

This package provides the SQLAlchemy async engine and session lifecycle,
the mapped models and the repositories the services read and write through.

Example:
    from src.infrastructure.database import get_session, StudentRepository

    async with get_session() as session:
        student = await StudentRepository(session).find_by_unique("student_number", "S001")
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_engine_for_url,
    create_schema,
    create_sessionmaker,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.repository import (
    CourseRepository,
    EnrollmentRepository,
    IntegrityConflictError,
    Repository,
    StudentRepository,
    TeacherRepository,
)

__all__ = [
    # Connection
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "create_engine_for_url",
    "create_schema",
    "create_sessionmaker",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    # Repositories
    "CourseRepository",
    "EnrollmentRepository",
    "IntegrityConflictError",
    "Repository",
    "StudentRepository",
    "TeacherRepository",
]
