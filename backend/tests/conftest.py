"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
# This ensures POSTGRES_TEST_* variables are available
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

# Settings are instantiated when revision_hub.config is first imported, so
# test configuration must be in the environment before any test module loads.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ["POSTGRES_USER"] = os.environ.get("POSTGRES_TEST_USER", "testuser")
os.environ["POSTGRES_PASSWORD"] = os.environ.get("POSTGRES_TEST_PASSWORD", "testpass")
os.environ["POSTGRES_DB"] = os.environ.get("POSTGRES_TEST_DB", "testdb")

from revision_hub.db.models import BookmarkedQuestion  # noqa: E402


# ============================================================================
# Time
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """A fixed review time (UTC)."""
    return datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


# ============================================================================
# Sample Data
# ============================================================================


def make_item(**overrides: Any) -> BookmarkedQuestion:
    """
    Build a detached bookmark with explicit column values.

    Column defaults only apply on flush, so every schedule field is set here.
    """
    values = {
        "id": "item-1",
        "user_id": "user-1",
        "question_id": "question-1",
        "srs_repetitions": 2,
        "srs_ease_factor": 2.5,
        "srs_interval": 3,
        "next_review_date": datetime(2024, 3, 15, tzinfo=timezone.utc),
        "is_custom_reminder_active": False,
        "custom_next_review_date": None,
    }
    values.update(overrides)
    return BookmarkedQuestion(**values)


@pytest.fixture
def item_factory():
    """Factory for bookmarks with custom column values."""
    return make_item


@pytest.fixture
def item() -> BookmarkedQuestion:
    """A bookmark two successful reviews in: {2, 2.5, 3}."""
    return make_item()


# ============================================================================
# Mock Database
# ============================================================================


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Create a mock database session for unit testing.
    """
    mock = MagicMock()
    mock.execute = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.delete = AsyncMock()
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.close = AsyncMock()
    mock.add = MagicMock()
    return mock
