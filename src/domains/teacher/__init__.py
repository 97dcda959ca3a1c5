# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher domain package.

This package provides teacher record management:
- Lookup by id, user account and employee number
- Creation with uniqueness checks
- Partial update and deletion that leaves courses in place
"""

from src.domains.teacher.service import TeacherService, teacher_records

__all__ = [
    "TeacherService",
    "teacher_records",
]
