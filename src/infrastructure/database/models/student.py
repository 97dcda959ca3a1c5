# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student model."""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.course import Enrollment
    from src.infrastructure.database.models.user import User


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Student record linked one-to-one to a user account.

    A student owns its enrollments: they are removed together with the
    student (explicitly by StudentService, and by ON DELETE CASCADE as a
    backstop in the store).
    """

    __tablename__ = "students"

    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    student_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(String(500))
    emergency_contact: Mapped[str | None] = mapped_column(String(200))
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(32))
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    user: Mapped["User | None"] = relationship(
        "User",
        primaryjoin="foreign(Student.user_id) == User.id",
        viewonly=True,
        lazy="selectin",
    )
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
