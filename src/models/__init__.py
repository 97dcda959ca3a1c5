# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request/response models for the record services."""

from src.models.common import normalize_identifier
from src.models.dashboard import ActivityType, DashboardStats, RecentActivity
from src.models.student import StudentCreateRequest, StudentResponse, StudentUpdateRequest
from src.models.teacher import TeacherCreateRequest, TeacherResponse, TeacherUpdateRequest

__all__ = [
    "normalize_identifier",
    "ActivityType",
    "DashboardStats",
    "RecentActivity",
    "StudentCreateRequest",
    "StudentResponse",
    "StudentUpdateRequest",
    "TeacherCreateRequest",
    "TeacherResponse",
    "TeacherUpdateRequest",
]
