"""
Integration Test Fixtures

Provides fixtures for integration tests that require a running PostgreSQL.
These fixtures set up real database connections and clean up after tests.

IMPORTANT: All integration tests use the TEST database only (via
POSTGRES_TEST_* env vars). The test_client fixture overrides get_db so the
application database is never touched. A safety check fixture
(verify_test_database) runs at session start and fails fast if production
credentials are detected.

When the test database is unreachable the whole integration suite is
skipped.
"""

import os
from pathlib import Path
from typing import AsyncGenerator, Callable
from urllib.parse import quote_plus

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Load .env file FIRST, before reading any environment variables
_project_root = Path(__file__).parent.parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

pytestmark = pytest.mark.integration


# =============================================================================
# Database Configuration
# =============================================================================


def get_test_db_config() -> dict:
    """
    Get test database configuration from environment variables.

    Priority: POSTGRES_TEST_* > POSTGRES_* > defaults
    """
    return {
        "host": os.environ.get("POSTGRES_HOST", "localhost"),
        "port": os.environ.get("POSTGRES_PORT", "5432"),
        "user": os.environ.get("POSTGRES_TEST_USER", os.environ.get("POSTGRES_USER", "testuser")),
        "password": os.environ.get(
            "POSTGRES_TEST_PASSWORD", os.environ.get("POSTGRES_PASSWORD", "testpass")
        ),
        "db": os.environ.get("POSTGRES_TEST_DB", os.environ.get("POSTGRES_DB", "testdb")),
    }


def get_test_db_url(async_driver: bool = True) -> str:
    """Build database URL from test config environment variables."""
    config = get_test_db_config()
    encoded_password = quote_plus(config["password"])
    driver = "postgresql+asyncpg" if async_driver else "postgresql+psycopg2"
    return f"{driver}://{config['user']}:{encoded_password}@{config['host']}:{config['port']}/{config['db']}"


TABLES_TO_CLEAN = [
    "review_history",
    "review_snapshots",
    "bookmarked_questions",
    "daily_review_summary",
    "user_preferences",
]


# =============================================================================
# Safety Check and Schema Setup
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def verify_test_database():
    """
    Safety check: Verify we're using test database credentials.

    Set ALLOW_PROD_DB_TESTS=1 to skip this check (for local development only).
    """
    if os.environ.get("ALLOW_PROD_DB_TESTS", "").lower() in ("1", "true", "yes"):
        return

    config = get_test_db_config()
    for indicator in ("revisionhub", "prod", "production"):
        assert indicator not in config["db"].lower(), (
            f"SAFETY CHECK FAILED: Database name '{config['db']}' looks like production! "
            "Set POSTGRES_TEST_DB environment variable or ALLOW_PROD_DB_TESTS=1."
        )
        assert indicator not in config["user"].lower(), (
            f"SAFETY CHECK FAILED: Database user '{config['user']}' looks like production! "
            "Set POSTGRES_TEST_USER environment variable or ALLOW_PROD_DB_TESTS=1."
        )


@pytest.fixture(scope="session")
def sync_engine(verify_test_database):
    """
    Synchronous engine used for schema setup and seeding.

    Tables are dropped and recreated once per session so the schema always
    matches the models. Skips the suite if the database is unreachable.
    """
    from revision_hub.db.base import Base

    engine = create_engine(get_test_db_url(async_driver=False))
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        engine.dispose()
        pytest.skip(f"Test database unavailable: {e}")

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables(sync_engine):
    """Truncate all tables before each test."""
    with sync_engine.begin() as conn:
        conn.execute(text(f"TRUNCATE TABLE {', '.join(TABLES_TO_CLEAN)} CASCADE"))
    yield


# =============================================================================
# Async Sessions
# =============================================================================


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Session factory bound to a fresh engine for this test's event loop.

    Concurrency tests open one session per simulated client.
    """
    engine = create_async_engine(get_test_db_url(async_driver=True), poolclass=NullPool)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# Seeding
# =============================================================================


@pytest.fixture
def seed_item(sync_engine) -> Callable[..., str]:
    """Insert a bookmark row and return its id."""

    def _seed(
        item_id: str = "item-1",
        user_id: str = "user-1",
        question_id: str = "question-1",
        repetitions: int = 2,
        ease_factor: float = 2.5,
        interval: int = 3,
        custom_active: bool = False,
        custom_date=None,
    ) -> str:
        with sync_engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO bookmarked_questions (id, user_id, question_id, "
                    "srs_repetitions, srs_ease_factor, srs_interval, next_review_date, "
                    "is_custom_reminder_active, custom_next_review_date, created_at, updated_at) "
                    "VALUES (:id, :user_id, :question_id, :reps, :ease, :interval, now(), "
                    ":custom_active, :custom_date, now(), now())"
                ),
                {
                    "id": item_id,
                    "user_id": user_id,
                    "question_id": question_id,
                    "reps": repetitions,
                    "ease": ease_factor,
                    "interval": interval,
                    "custom_active": custom_active,
                    "custom_date": custom_date,
                },
            )
        return item_id

    return _seed


# =============================================================================
# API Client
# =============================================================================


@pytest.fixture
def test_client(sync_engine) -> TestClient:
    """
    TestClient whose get_db yields sessions on the test database.

    NullPool keeps connections from leaking across the client's event loop.
    """
    from revision_hub.db.base import get_db
    from revision_hub.main import app

    engine = create_async_engine(get_test_db_url(async_driver=True), poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
