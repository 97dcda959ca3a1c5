# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

import logging
from collections.abc import Iterator
from datetime import date
from typing import Any

import pytest
import structlog

from src.core.config import clear_settings_cache


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings so environment patches take effect per test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo handlers and levels installed by setup_logging()."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires a database)"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_record_id() -> str:
    """Provide a sample record ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_student_data() -> dict[str, Any]:
    """Provide sample student create data for testing."""
    return {
        "user_id": "user-100",
        "student_number": "S100",
        "date_of_birth": date(2008, 5, 1),
        "phone": "+90 555 000 0000",
    }


@pytest.fixture
def sample_teacher_data() -> dict[str, Any]:
    """Provide sample teacher create data for testing."""
    return {
        "user_id": "user-200",
        "employee_number": "E200",
        "department": "Mathematics",
        "title": "Senior Lecturer",
    }
