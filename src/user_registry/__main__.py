"""
Process entry point: `python -m user_registry` or the `user-registry` script.

Builds the object graph once (Database -> TransactionGateway -> UserRepository
-> UserService -> UserConsole), runs the menu, and disposes the database
engine on the way out whether the loop ended normally or not.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from user_registry.cli.console import UserConsole
from user_registry.config.settings import Settings, get_settings
from user_registry.core.logging import setup_logging
from user_registry.database.gateway import TransactionGateway
from user_registry.database.session import Database
from user_registry.repositories.user_repository import UserRepository
from user_registry.services.user_service import UserService

logger = logging.getLogger("user_registry.main")


def build_console(database: Database, **console_kwargs) -> UserConsole:
    gateway = TransactionGateway(database.new_session)
    service = UserService(UserRepository(gateway))
    return UserConsole(service, **console_kwargs)


async def run(settings: Settings, database: Database | None = None, **console_kwargs) -> None:
    database = database or Database.from_settings(settings)
    logger.info("app.start", extra={"database_url": settings.SAFE_DATABASE_URL, "env": settings.ENV})
    try:
        if settings.DB_CREATE_TABLES:
            await database.create_tables()
        await build_console(database, **console_kwargs).start()
    finally:
        await database.dispose()
        logger.info("app.stop")


def main() -> int:
    settings = get_settings()
    setup_logging(settings)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        print("\nApplication terminated.")
    except Exception:
        logger.exception("app.fatal_error")
        print("The application could not start. See the logs for details.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
