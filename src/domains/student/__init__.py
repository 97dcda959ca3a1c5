# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student record management:
- Lookup by id, user account and student number
- Creation with uniqueness checks
- Partial update and cascading deletion
"""

from src.domains.student.service import STUDENT_RECORDS, StudentService

__all__ = [
    "STUDENT_RECORDS",
    "StudentService",
]
