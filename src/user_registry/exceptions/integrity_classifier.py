"""
Sub-classification of SQLAlchemy IntegrityError by the constraint that fired.

PostgreSQL drivers expose a SQLSTATE and the constraint name through their
diagnostics, which is exact. SQLite and MySQL only give a message, so the
message is matched against known phrases as a fallback.

The result is a ConstraintKind value, never an exception: it feeds log
context and lets the repository recognise a unique violation on email.
"""
import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"
    UNKNOWN = "unknown"


# Class 23 (integrity constraint violation):
# https://www.postgresql.org/docs/current/errcodes-appendix.html
SQLSTATE_KINDS = {
    "23505": ConstraintKind.UNIQUE,
    "23502": ConstraintKind.NOT_NULL,
    "23503": ConstraintKind.FOREIGN_KEY,
    "23514": ConstraintKind.CHECK,
}

# Checked in order; "null value in column" must not be read as a unique violation, etc.
MESSAGE_PHRASES: tuple[tuple[ConstraintKind, tuple[str, ...]], ...] = (
    (ConstraintKind.UNIQUE, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (ConstraintKind.NOT_NULL, ("not null", "null value in column")),
    (ConstraintKind.FOREIGN_KEY, ("foreign key", "is not present in table")),
    (ConstraintKind.CHECK, ("check constraint", "check failed")),
)


def _from_sqlstate(orig) -> tuple[ConstraintKind | None, str | None]:
    # psycopg 3 names it `sqlstate`, psycopg2 `pgcode`
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if not sqlstate:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)

    kind = SQLSTATE_KINDS.get(sqlstate)
    if kind is None:
        logger.warning("integrity.unknown_sqlstate", extra={"sqlstate": sqlstate, "constraint": constraint})
        kind = ConstraintKind.UNKNOWN
    return kind, constraint


def _from_message(message: str) -> ConstraintKind:
    lowered = message.lower()
    for kind, phrases in MESSAGE_PHRASES:
        if any(phrase in lowered for phrase in phrases):
            return kind

    logger.warning("integrity.unknown_message", extra={"message_snippet": message[:200]})
    return ConstraintKind.UNKNOWN


def classify_integrity_error(exc: IntegrityError) -> tuple[ConstraintKind, str | None]:
    """
    Return (kind, constraint name) for an IntegrityError.

    The constraint name is only known when the driver reports it (PostgreSQL).
    """
    orig = exc.orig

    kind, constraint = _from_sqlstate(orig)
    if kind is not None:
        return kind, constraint

    return _from_message(str(orig) if orig is not None else str(exc)), None
