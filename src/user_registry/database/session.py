"""
Database lifecycle: one AsyncEngine and one session factory per process.

`Database` is constructed explicitly by the entry point and passed down to the
gateway; there is no module-level engine. It is created once at startup and
disposed once at shutdown:

    async with Database(settings.DATABASE_URL) as database:
        gateway = TransactionGateway(database.new_session)
        ...
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from user_registry.config.settings import Settings, safe_log_db_url
from user_registry.database.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and the `async_sessionmaker` bound to it."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self._engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,  # Enables connection health checks
        )
        # expire_on_commit=False keeps loaded attributes readable after the
        # session is closed, so repositories can return detached instances.
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._disposed = False
        logger.info("database.engine_created", extra={"database_url": safe_log_db_url(url)})

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)

    @property
    def engine(self) -> AsyncEngine:
        self._ensure_open()
        return self._engine

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def new_session(self) -> AsyncSession:
        """Open a new session. Refused once dispose() has started."""
        self._ensure_open()
        return self._session_factory()

    def _ensure_open(self) -> None:
        if self._disposed:
            raise RuntimeError("Database has been disposed; no operations are allowed after shutdown")

    async def create_tables(self) -> None:
        """Create missing tables for all registered models. Not a migration tool."""
        # registers the models with Base.metadata
        from user_registry import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("database.tables_ready")

    async def dispose(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        if self._disposed:
            logger.debug("database.already_disposed")
            return
        # closed before the pool drains so no new session can start meanwhile
        self._disposed = True
        await self._engine.dispose()
        logger.info("database.engine_disposed")

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
