# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared record rules for students and teachers.

This package provides:
- RecordService: unique-checked CRUD configured per entity
- DeletePolicy / DependentRelation: explicit cascade configuration
- The error taxonomy raised by the record services
"""

from src.domains.records.errors import (
    ConflictError,
    NotFoundError,
    RecordServiceError,
    StoreError,
    ValidationError,
)
from src.domains.records.service import (
    DeletePolicy,
    DependentRelation,
    RecordService,
    RecordSpec,
    parse_record_id,
)

__all__ = [
    "ConflictError",
    "NotFoundError",
    "RecordServiceError",
    "StoreError",
    "ValidationError",
    "DeletePolicy",
    "DependentRelation",
    "RecordService",
    "RecordSpec",
    "parse_record_id",
]
