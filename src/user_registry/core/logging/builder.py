# src/user_registry/core/logging/builder.py
"""
Logging builder: create and apply a dictConfig logging configuration.

 - make_dict_config(settings) builds a dictConfig-compatible mapping from Settings
 - setup_logging(settings) creates LOG_DIR when needed and applies the mapping

Handler selection:

| LOG_TO_STDOUT | LOG_DIR set | Active handlers                 |
| ------------- | ----------- | ------------------------------- |
| true          | any         | console + error_console         |
| false         | no          | console + error_console         |
| false         | yes         | console + file + error_file     |
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from .filters import OperationIdFilter, RedactFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

# Settings type only; get_settings() is not called here to avoid import-time side effects.
from user_registry.config.settings import Settings

STANDARD_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(operation_id)s | %(message)s"


def _file_logging_enabled(settings: Settings) -> bool:
    return not settings.LOG_TO_STDOUT and settings.LOG_DIR is not None


def _build_handlers(settings: Settings) -> dict[str, dict]:
    handlers = {"console": get_console_handler(settings)}
    if _file_logging_enabled(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)
    return handlers


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping for `settings`.

    Formatters "standard" (colored in text mode) and "json"; filters
    "operation_id" and "redact" on every handler; the root logger plus
    `sqlalchemy.engine`, which only goes below WARNING when ENABLE_SQL_LOGGING is set.
    """
    handlers = _build_handlers(settings)
    handler_names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
                "format": STANDARD_FORMAT,
            },
            "json": {"()": JsonFormatter, "env": settings.ENV},
        },
        "filters": {
            "operation_id": {"()": OperationIdFilter},
            "redact": {"()": RedactFilter},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": handler_names, "level": settings.LOG_LEVEL, "propagate": True},
            # SQL statements carry user data
            "sqlalchemy.engine": {
                "handlers": handler_names,
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Initialize logging from settings.

    Creates LOG_DIR when writing files, applies the dictConfig, then adds
    OperationIdFilter to the root logger so `%(operation_id)s` is also
    defined for records handled by handlers installed outside this config.
    """
    if _file_logging_enabled(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    root = logging.getLogger()
    if not any(isinstance(f, OperationIdFilter) for f in root.filters):
        root.addFilter(OperationIdFilter())
