# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request and response models."""

from datetime import datetime

from pydantic import Field, field_validator

from src.models.common import PatchModel, RequestModel, ResponseModel, require_identifier


class TeacherCreateRequest(RequestModel):
    """Data required to create a teacher record."""

    user_id: str = Field(min_length=1, max_length=64, description="Linked user account")
    employee_number: str = Field(min_length=1, max_length=32)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=100)
    qualifications: str | None = Field(default=None, max_length=500)
    specialization: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=32)
    office_location: str | None = Field(default=None, max_length=100)
    hire_date: datetime | None = Field(
        default=None,
        description="Defaults to the creation time",
    )

    @field_validator("employee_number")
    @classmethod
    def _normalize_employee_number(cls, value: str) -> str:
        return require_identifier(value)

    @field_validator("user_id")
    @classmethod
    def _user_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class TeacherUpdateRequest(PatchModel):
    """Partial update of a teacher record.

    The linked user account cannot be changed.
    """

    employee_number: str | None = Field(default=None, min_length=1, max_length=32)
    department: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=100)
    qualifications: str | None = Field(default=None, max_length=500)
    specialization: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=32)
    office_location: str | None = Field(default=None, max_length=100)
    hire_date: datetime | None = None

    @field_validator("employee_number")
    @classmethod
    def _normalize_employee_number(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("employee_number cannot be cleared")
        return require_identifier(value)

    @field_validator("hire_date")
    @classmethod
    def _hire_date_required(cls, value: datetime | None) -> datetime:
        if value is None:
            raise ValueError("hire_date cannot be cleared")
        return value


class TeacherResponse(ResponseModel):
    """Teacher record as returned to callers."""

    id: str
    user_id: str
    employee_number: str
    department: str | None = None
    title: str | None = None
    qualifications: str | None = None
    specialization: str | None = None
    phone: str | None = None
    office_location: str | None = None
    hire_date: datetime
    created_at: datetime
    updated_at: datetime
    full_name: str | None = None
    email: str | None = None
