# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.course import Course
    from src.infrastructure.database.models.user import User


class Teacher(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Teacher record linked one-to-one to a user account.

    A teacher instructs courses but does not own them; deleting a teacher
    never deletes courses (see RecordsSettings.teacher_course_policy).
    """

    __tablename__ = "teachers"

    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    employee_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    department: Mapped[str | None] = mapped_column(String(100))
    title: Mapped[str | None] = mapped_column(String(100))
    qualifications: Mapped[str | None] = mapped_column(String(500))
    specialization: Mapped[str | None] = mapped_column(String(200))
    phone: Mapped[str | None] = mapped_column(String(32))
    office_location: Mapped[str | None] = mapped_column(String(100))
    hire_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    user: Mapped["User | None"] = relationship(
        "User",
        primaryjoin="foreign(Teacher.user_id) == User.id",
        viewonly=True,
        lazy="selectin",
    )
    courses: Mapped[list["Course"]] = relationship(
        "Course",
        back_populates="teacher",
        passive_deletes=True,
        lazy="raise",
    )
