# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard read model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Kind of event shown in the recent activity feed."""

    ENROLLMENT = "enrollment"
    COMPLETION = "completion"
    COURSE_CREATED = "course_created"


class RecentActivity(BaseModel):
    """One entry of the recent activity feed."""

    id: str
    type: ActivityType
    description: str
    timestamp: datetime
    student_name: str | None = None
    course_name: str | None = None


class DashboardStats(BaseModel):
    """Summary statistics computed from courses, enrollments and people.

    active_enrollments + completed_enrollments may be lower than
    total_enrollments: dropped and suspended enrollments are counted in the
    total only. average_grade is None when no completed enrollment has a
    grade, which is different from an average of zero.
    """

    total_courses: int = 0
    total_students: int = 0
    total_teachers: int = 0
    total_enrollments: int = 0
    active_enrollments: int = 0
    completed_enrollments: int = 0
    completion_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_grade: float | None = None
    recent_activities: list[RecentActivity] = Field(default_factory=list)
