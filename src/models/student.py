# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request and response models."""

from datetime import date, datetime

from pydantic import Field, field_validator

from src.models.common import PatchModel, RequestModel, ResponseModel, require_identifier


class StudentCreateRequest(RequestModel):
    """Data required to create a student record."""

    user_id: str = Field(min_length=1, max_length=64, description="Linked user account")
    student_number: str = Field(min_length=1, max_length=32)
    date_of_birth: date
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=500)
    emergency_contact: str | None = Field(default=None, max_length=200)
    emergency_contact_phone: str | None = Field(default=None, max_length=32)
    enrollment_date: datetime | None = Field(
        default=None,
        description="Defaults to the creation time",
    )

    @field_validator("student_number")
    @classmethod
    def _normalize_student_number(cls, value: str) -> str:
        return require_identifier(value)

    @field_validator("user_id")
    @classmethod
    def _user_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class StudentUpdateRequest(PatchModel):
    """Partial update of a student record.

    The linked user account cannot be changed.
    """

    student_number: str | None = Field(default=None, min_length=1, max_length=32)
    date_of_birth: date | None = None
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=500)
    emergency_contact: str | None = Field(default=None, max_length=200)
    emergency_contact_phone: str | None = Field(default=None, max_length=32)
    enrollment_date: datetime | None = None

    @field_validator("student_number")
    @classmethod
    def _normalize_student_number(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("student_number cannot be cleared")
        return require_identifier(value)

    @field_validator("date_of_birth", "enrollment_date")
    @classmethod
    def _required_dates(cls, value: date | datetime | None) -> date | datetime:
        if value is None:
            raise ValueError("field cannot be cleared")
        return value


class StudentResponse(ResponseModel):
    """Student record as returned to callers."""

    id: str
    user_id: str
    student_number: str
    date_of_birth: date
    phone: str | None = None
    address: str | None = None
    emergency_contact: str | None = None
    emergency_contact_phone: str | None = None
    enrollment_date: datetime
    created_at: datetime
    updated_at: datetime
    full_name: str | None = None
    email: str | None = None
