from pathlib import Path

import pytest
from pydantic import ValidationError

from user_registry.config.settings import Settings, get_settings, safe_log_db_url


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # keep the developer's shell environment out of these tests
    for name in ("DB_BACKEND", "POSTGRES_DB", "TEST_POSTGRES_DB", "TESTING", "LOG_LEVEL", "LOG_FORMAT", "SQLITE_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_postgres_url_by_default():
    settings = make_settings(POSTGRES_PASSWORD="s3cret", POSTGRES_HOST="db", POSTGRES_PORT=6543)
    assert settings.DATABASE_URL == "postgresql+psycopg://postgres:s3cret@db:6543/users"


def test_testing_switches_to_test_database():
    settings = make_settings(TESTING=True, TEST_POSTGRES_DB="users_test")
    assert settings.DATABASE_URL.endswith("/users_test")

    # TESTING without a test database name keeps the regular one
    assert make_settings(TESTING=True).DATABASE_URL.endswith("/users")


def test_sqlite_url():
    settings = make_settings(DB_BACKEND="SQLite", SQLITE_PATH=Path("data/users.db"))
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///data/users.db"


def test_safe_url_hides_credentials():
    settings = make_settings(POSTGRES_USERNAME="admin", POSTGRES_PASSWORD="s3cret")
    assert "s3cret" not in settings.SAFE_DATABASE_URL
    assert "admin" not in settings.SAFE_DATABASE_URL
    assert settings.SAFE_DATABASE_URL == "postgresql+psycopg://localhost:5432/users"


def test_safe_url_leaves_sqlite_alone():
    assert safe_log_db_url("sqlite+aiosqlite:///users.db") == "sqlite+aiosqlite:///users.db"


def test_values_are_normalised():
    settings = make_settings(LOG_LEVEL="debug", LOG_CONSOLE_LEVEL="error", LOG_FORMAT="TEXT")
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_CONSOLE_LEVEL == "ERROR"
    assert settings.LOG_FORMAT == "text"


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        make_settings(LOG_LEVEL="loud")
    with pytest.raises(ValidationError):
        make_settings(DB_BACKEND="oracle")


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("DB_BACKEND", "sqlite")
    monkeypatch.setenv("SQLITE_PATH", "/tmp/registry.db")
    assert make_settings().DATABASE_URL == "sqlite+aiosqlite:////tmp/registry.db"


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
