# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the student and teacher services.

- ValidationError: malformed or missing input, raised before any store access.
- ConflictError: a unique business identifier or user link is already taken,
  found either by the pre-check or by the store's own constraint.
- NotFoundError: the target of an update does not exist. Reads and deletes
  report absence as None / False instead.
- StoreError: the database failed. Services never catch it.

A transport adapter maps these to 400, 409 and 404 responses respectively.
"""

from typing import Any

from src.infrastructure.database.connection import DatabaseError

StoreError = DatabaseError


class RecordServiceError(Exception):
    """Base exception for record service errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(RecordServiceError):
    """Raised when input data is missing required fields or malformed."""

    pass


class NotFoundError(RecordServiceError):
    """Raised when the record targeted by an update does not exist."""

    pass


class ConflictError(RecordServiceError):
    """Raised when a unique value is already held by another record.

    Attributes:
        field: Name of the conflicting field, when known.
        value: The conflicting value, when known.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the conflict error.

        Args:
            message: Human-readable error description.
            field: Name of the conflicting field.
            value: The conflicting value.
        """
        details: dict[str, Any] = {}
        if field is not None:
            details["field"] = field
            details["value"] = value
        super().__init__(message, details)
        self.field = field
        self.value = value
