# src/user_registry/core/logging/filters.py
"""
Logging filters

Operation ID filter and helpers for logging.

Every console action (create, read, update, ...) runs under its own short
operation id. The id is stored in a `contextvars.ContextVar` so it follows
the action across `await` boundaries, and `OperationIdFilter` copies it onto
each `LogRecord` as `record.operation_id`. Formatters can then reference
`%(operation_id)s` and every log line written while handling one menu action
shares the same id.

How it is intended to be used
------------------------------
1. `builder.make_dict_config()` declares the filter and attaches it to every
   handler:

     "filters": {"operation_id": {"()": OperationIdFilter}},
     "handlers": {"console": {..., "filters": ["operation_id", "redact"]}}

2. The console driver calls `set_operation_id(new_operation_id())` before
   dispatching an action and `reset_operation_id(token)` afterwards.

3. Records emitted outside an action get the sentinel "-".

Security
--------
- `RedactFilter` masks record attributes whose names look like secrets
  (password, token, ...). Values passed through `extra={...}` land on the
  record as attributes, so this is where they get scrubbed.
"""

import contextvars
import logging
import uuid
from logging import LogRecord

_operation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation_id", default=None
)


def new_operation_id() -> str:
    """Return a short random id suitable for correlating one console action."""
    return uuid.uuid4().hex[:12]


def set_operation_id(operation_id: str | None):
    """
    Set the operation id in the current context and return the token to allow reset.
    """
    return _operation_id_ctx.set(operation_id)


def reset_operation_id(token) -> None:
    _operation_id_ctx.reset(token)


def get_operation_id() -> str | None:
    return _operation_id_ctx.get()


class OperationIdFilter(logging.Filter):
    """
    Guarantee that every LogRecord has an `operation_id` attribute.

    Precedence:
      - an explicit `extra={"operation_id": ...}` on the logging call
      - the context variable set by the console driver
      - the sentinel "-"

    Always returns True; the filter only annotates records.
    """

    def filter(self, record: LogRecord) -> bool:
        record.operation_id = (
            getattr(record, "operation_id", None) or get_operation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Mask record attributes that carry secrets."""

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
