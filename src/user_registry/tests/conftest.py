"""
Core pytest configuration for the entire test suite.

This module provides only the database setup and logging installation that
every kind of test needs (validators, gateway, repositories, services, console).

Domain-specific fixtures live in tests/test_fixtures/ and are imported at the
bottom of this file so they are available everywhere without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Keep this block above the project imports: importing SQLAlchemy and aiosqlite
# may create their loggers, and DEBUG output from them drowns test reports.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncio",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest

from user_registry.config.settings import Settings
from user_registry.core.logging.builder import setup_logging
from user_registry.database.gateway import TransactionGateway
from user_registry.database.session import Database

from .test_fixtures.settings_fixtures import make_test_settings

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install application logging for the whole session.

    Root level is DEBUG so `caplog` sees every record the code emits; the
    console handler stays at WARNING so test output is not flooded.
    """
    setup_logging(make_test_settings())
    yield


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return make_test_settings(SQLITE_PATH=tmp_path / "users.db")


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """
    A fresh SQLite file per test with the schema created.

    A file rather than `:memory:` because every gateway call opens its own
    session and in-memory SQLite databases are per connection.
    """
    db = Database.from_settings(test_settings)
    await db.create_tables()
    logger.debug("Using test DB: %s", test_settings.SAFE_DATABASE_URL)

    yield db

    await db.dispose()


@pytest.fixture
def gateway(database: Database) -> TransactionGateway:
    return TransactionGateway(database.new_session)


# Repository and service fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402
    user_repository,
    user_service,
    sample_user_data,
    create_user,
    created_user,
    multiple_users,
    fetch_user_by_email,
)

__all__ = [
    "user_repository",
    "user_service",
    "sample_user_data",
    "create_user",
    "created_user",
    "multiple_users",
    "fetch_user_by_email",
]
