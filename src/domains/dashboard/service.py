# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard service for summary statistics.

This module provides the DashboardService class, a read-only aggregator
over courses, enrollments, students and teachers. It issues several
independent queries without a snapshot transaction, so figures may be
slightly inconsistent with each other under concurrent writes.

Recent activity feed:
- Up to recent_enrollment_limit newest enrollments ("enrollment"),
  recent_completion_limit latest completions ("completion") and
  recent_course_limit newest courses ("course_created") are fetched.
- The merged events are ordered newest first by timestamp. Equal
  timestamps are ordered by the creation time of the underlying record
  (newest first), then by source in the order enrollment, completion,
  course_created.
- The feed is capped at recent_activity_limit entries.

Example:
    >>> service = DashboardService(db)
    >>> stats = await service.get_dashboard_stats()
    >>> stats.completion_rate
    0.5
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import DashboardSettings
from src.infrastructure.database.models import Course, Enrollment, EnrollmentStatus, Student
from src.infrastructure.database.repository import (
    CourseRepository,
    EnrollmentRepository,
    StudentRepository,
    TeacherRepository,
)
from src.models.dashboard import ActivityType, DashboardStats, RecentActivity
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

UNKNOWN_INSTRUCTOR = "Unknown"


def _student_name(student: Student | None) -> str | None:
    if student is None:
        return None
    if student.user is not None:
        return student.user.full_name
    return student.student_number


def _instructor_name(course: Course) -> str:
    teacher = course.teacher
    if teacher is None or teacher.user is None:
        return UNKNOWN_INSTRUCTOR
    return teacher.user.full_name


class DashboardService:
    """Read-only aggregator producing dashboard statistics.

    Attributes:
        _db: Async database session.
        _settings: Feed limits and grade precision.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: DashboardSettings | None = None,
    ) -> None:
        """Initialize dashboard service.

        Args:
            db: Async database session.
            settings: Dashboard configuration, defaults when not given.
        """
        self._db = db
        self._settings = settings or DashboardSettings()
        self._courses = CourseRepository(db)
        self._students = StudentRepository(db)
        self._teachers = TeacherRepository(db)
        self._enrollments = EnrollmentRepository(db)

    async def get_dashboard_stats(self) -> DashboardStats:
        """Compute the dashboard statistics.

        Returns:
            DashboardStats with counts, completion rate, average grade
            and the recent activity feed.

        Raises:
            StoreError: If any of the underlying reads fails.
        """
        total_courses = await self._courses.count()
        total_students = await self._students.count()
        total_teachers = await self._teachers.count()

        by_status = await self._enrollments.count_by_status()
        total_enrollments = sum(by_status.values())
        active = by_status.get(EnrollmentStatus.ACTIVE, 0)
        completed = by_status.get(EnrollmentStatus.COMPLETED, 0)

        completion_rate = completed / total_enrollments if total_enrollments else 0.0

        average = await self._enrollments.average_completed_grade()
        average_grade = (
            round(float(average), self._settings.grade_precision) if average is not None else None
        )

        stats = DashboardStats(
            total_courses=total_courses,
            total_students=total_students,
            total_teachers=total_teachers,
            total_enrollments=total_enrollments,
            active_enrollments=active,
            completed_enrollments=completed,
            completion_rate=completion_rate,
            average_grade=average_grade,
            recent_activities=await self.get_recent_activities(),
        )

        logger.debug(
            "Dashboard computed: courses=%s students=%s teachers=%s enrollments=%s",
            total_courses,
            total_students,
            total_teachers,
            total_enrollments,
        )
        return stats

    async def get_recent_activities(self) -> list[RecentActivity]:
        """Build the merged recent activity feed, newest first."""
        settings = self._settings
        events: list[tuple[RecentActivity, datetime]] = []

        for enrollment in await self._enrollments.most_recent(settings.recent_enrollment_limit):
            events.append((self._enrollment_activity(enrollment), ensure_utc(enrollment.created_at)))

        for enrollment in await self._enrollments.most_recent_completions(
            settings.recent_completion_limit
        ):
            events.append((self._completion_activity(enrollment), ensure_utc(enrollment.created_at)))

        for course in await self._courses.most_recent(settings.recent_course_limit):
            events.append((self._course_activity(course), ensure_utc(course.created_at)))

        # sorted() is stable, so full ties keep the source order above
        events.sort(key=lambda event: (event[0].timestamp, event[1]), reverse=True)
        return [activity for activity, _ in events[: settings.recent_activity_limit]]

    def _enrollment_activity(self, enrollment: Enrollment) -> RecentActivity:
        student_name = _student_name(enrollment.student)
        course_name = enrollment.course.title if enrollment.course else None
        return RecentActivity(
            id=str(enrollment.id),
            type=ActivityType.ENROLLMENT,
            description=f"{student_name} enrolled in {course_name}",
            timestamp=ensure_utc(enrollment.created_at),
            student_name=student_name,
            course_name=course_name,
        )

    def _completion_activity(self, enrollment: Enrollment) -> RecentActivity:
        student_name = _student_name(enrollment.student)
        course_name = enrollment.course.title if enrollment.course else None
        description = f"{student_name} completed {course_name}"
        if enrollment.grade is not None:
            description += f" with grade {float(enrollment.grade):.1f}%"
        return RecentActivity(
            id=str(enrollment.id),
            type=ActivityType.COMPLETION,
            description=description,
            timestamp=ensure_utc(enrollment.completion_date),
            student_name=student_name,
            course_name=course_name,
        )

    def _course_activity(self, course: Course) -> RecentActivity:
        return RecentActivity(
            id=str(course.id),
            type=ActivityType.COURSE_CREATED,
            description=f"New course created: {course.title} by {_instructor_name(course)}",
            timestamp=ensure_utc(course.created_at),
            course_name=course.title,
        )
