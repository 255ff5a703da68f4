"""
Custom logging formatters.

  - JsonFormatter: one JSON object per line, for log files and collectors.
    Extras that json cannot encode are written as strings, so formatting never fails.

  - ColorFormatter: compact ANSI-colored lines for an interactive terminal,
    selected when LOG_FORMAT=text.

Both read `operation_id` from the record; OperationIdFilter guarantees it exists.
"""

import json
import logging
from logging import LogRecord
from typing import Any

from user_registry.utils.logging import get_project_name, get_project_version

PROJECT_VERSION = get_project_version()

# Attributes every LogRecord carries; anything else on the record came from `extra`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "operation_id", "taskName"}


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


def record_extras(record: LogRecord) -> dict[str, Any]:
    """Values passed through `extra={...}`, made JSON-safe."""
    return {
        key: _json_safe(value)
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Args:
        env: environment name written to every record.
        service: logical service name; defaults to the project name.
        datefmt: passed through to logging.Formatter.formatTime.
    """

    def __init__(self, *, env: str | None = None, service: str | None = None, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service or get_project_name(default="user-registry")

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = record_extras(record)
        # fixed fields win over extras with the same name
        payload.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            pathname=record.pathname,
            lineno=record.lineno,
            operation_id=getattr(record, "operation_id", "-"),
            service=self.service,
            env=self.env,
            version=PROJECT_VERSION,
        )

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Terminal formatter:
    TIMESTAMP | LEVEL | LOGGER | OPERATION_ID | MESSAGE
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;41m",
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        level = f"{self.COLOR_CODES.get(record.levelname, '')}{record.levelname:<8}{self.RESET}"
        line = " | ".join(
            (
                self.formatTime(record, self.datefmt),
                level,
                f"{record.name:<32}",
                f"{getattr(record, 'operation_id', '-'):<12}",
                record.getMessage(),
            )
        )

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line
