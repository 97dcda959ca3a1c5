# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard domain package.

Read-only statistics and recent activity feed over the records graph.
"""

from src.domains.dashboard.service import DashboardService

__all__ = ["DashboardService"]
