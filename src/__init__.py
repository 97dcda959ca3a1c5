"""Athena school records backend.

Domain service layer for student and teacher records, backed by an async
SQLAlchemy repository, plus the dashboard read model computed from
courses and enrollments.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
