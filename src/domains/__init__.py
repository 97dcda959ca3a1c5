# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the school records service.

Domains:
    records: Shared unique-checked CRUD, delete policies and error taxonomy.
    student: Student record management.
    teacher: Teacher record management.
    dashboard: Read-only statistics and recent activity feed.
"""
