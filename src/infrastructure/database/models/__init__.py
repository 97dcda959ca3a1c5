# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the records database."""

from src.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    new_id,
)
from src.infrastructure.database.models.course import Course, Enrollment, EnrollmentStatus
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.teacher import Teacher
from src.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_id",
    "Course",
    "Enrollment",
    "EnrollmentStatus",
    "Student",
    "Teacher",
    "User",
]
