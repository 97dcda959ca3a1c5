# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course and enrollment models.

These are read by the dashboard and touched by the delete policies of the
student and teacher services; they have no service of their own here.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.student import Student
    from src.infrastructure.database.models.teacher import Teacher


class EnrollmentStatus(str, enum.Enum):
    """Lifecycle status of an enrollment."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"
    SUSPENDED = "suspended"


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Course, optionally instructed by a teacher."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    course_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    teacher_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        index=True,
    )
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    max_enrollments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    teacher: Mapped["Teacher | None"] = relationship(
        "Teacher",
        back_populates="courses",
        lazy="raise",
    )
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's enrollment in a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(
            EnrollmentStatus,
            name="enrollment_status",
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            length=16,
        ),
        nullable=False,
        default=EnrollmentStatus.ACTIVE,
    )
    grade: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    completion_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="enrollments",
        lazy="raise",
    )
    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="enrollments",
        lazy="raise",
    )
