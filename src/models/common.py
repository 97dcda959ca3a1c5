# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared helpers for request and response models.

Business identifiers (student numbers, employee numbers) are compared
exactly and case-sensitively after surrounding whitespace is removed.
normalize_identifier() is the single place that rule lives; request
validation and every existence check go through it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


def normalize_identifier(value: str) -> str:
    """Normalize a business identifier for storage and comparison.

    Args:
        value: Raw identifier as supplied by the caller.

    Returns:
        The identifier without surrounding whitespace. Case is preserved.
    """
    return value.strip()


def require_identifier(value: str) -> str:
    """Normalize an identifier and reject blank values.

    Raises:
        ValueError: If nothing but whitespace was supplied.
    """
    normalized = normalize_identifier(value)
    if not normalized:
        raise ValueError("must not be blank")
    return normalized


class RequestModel(BaseModel):
    """Base for create and update requests. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class PatchModel(RequestModel):
    """Base for partial updates.

    Only the fields the caller actually supplied are applied; a field
    explicitly set to None clears it, an omitted field is left alone.
    """

    def changes(self) -> dict[str, Any]:
        """Fields explicitly supplied by the caller."""
        return self.model_dump(exclude_unset=True)


class ResponseModel(BaseModel):
    """Base for responses built from ORM objects."""

    model_config = ConfigDict(from_attributes=True)
