from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import Literal
from functools import lru_cache
from urllib.parse import urlparse


class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database backend selection
    DB_BACKEND: Literal["postgresql", "sqlite"] = "postgresql"

    # PostgreSQL configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "users"

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLite configuration (used when DB_BACKEND=sqlite)
    SQLITE_PATH: Path = Path("users.db")

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_CREATE_TABLES: bool = True

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_CONSOLE_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = False
    LOG_DIR: Path | None = Path("logs")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the configured backend.

        - `DB_BACKEND=sqlite` builds an aiosqlite URL from `SQLITE_PATH`.
        - Otherwise a PostgreSQL URL is built. When `TESTING=True` and
          `TEST_POSTGRES_DB` is provided, the test database name replaces
          `POSTGRES_DB` so tests never touch the regular database.
        """
        if self.DB_BACKEND == "sqlite":
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    @property
    def SAFE_DATABASE_URL(self) -> str:
        """Database URL without credentials, safe to write to logs."""
        return safe_log_db_url(self.DATABASE_URL)

    # --- Validators ---
    @field_validator("LOG_LEVEL", "LOG_CONSOLE_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize level names to uppercase before Literal validation,
        so `LOG_LEVEL=debug` in the environment is accepted.
        """
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", "DB_BACKEND", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: str | None) -> str | None:
        return v.lower() if isinstance(v, str) else v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def safe_log_db_url(db_url: str) -> str:
    """
    Return a sanitized version of the database URL for safe logging.

    Username and password are dropped; scheme, host, port and database name
    are kept. SQLite URLs carry no credentials and are returned unchanged.
    """
    parsed = urlparse(db_url)
    if parsed.scheme.startswith("sqlite"):
        return db_url
    return f"{parsed.scheme}://{parsed.hostname}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


# get_settings() takes no arguments and always returns the same settings from the environment,
# so it is cached with @lru_cache().
@lru_cache()
def get_settings() -> Settings:
    return Settings()
