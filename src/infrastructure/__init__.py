# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for the records store.

This package contains:
- Database connection management (PostgreSQL, SQLite for local runs)
- SQLAlchemy models
- Repositories used by the domain services
"""
