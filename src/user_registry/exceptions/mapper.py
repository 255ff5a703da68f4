"""
Map raw failures to the closed ErrorKind set and to loggable context.

`classify_failure` is the single place where exception types are inspected;
the gateway calls it once per failed transaction.
"""
import re
import asyncio

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from .base import BusinessRuleError, ErrorKind
from .integrity_classifier import ConstraintKind, classify_integrity_error


# Connectivity problems: the statement may succeed if retried later.
_TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError,
                     ConnectionError, asyncio.TimeoutError)


def classify_failure(exc: BaseException) -> ErrorKind:
    """
    Return the ErrorKind for an exception raised inside a transaction.

    Order matters: IntegrityError is a DBAPIError like OperationalError, so it is checked first.
    """
    if isinstance(exc, BusinessRuleError):
        return ErrorKind.BUSINESS_RULE
    if isinstance(exc, IntegrityError):
        return ErrorKind.CONSTRAINT_VIOLATION
    if isinstance(exc, _TRANSIENT_ERRORS):
        return ErrorKind.TRANSIENT_STORE_ERROR
    if isinstance(exc, SQLAlchemyError):
        return ErrorKind.FATAL_STORE_ERROR
    return ErrorKind.UNEXPECTED


# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Column names from Postgres messages:
      - 'null value in column "email" violates not-null constraint'
      - 'DETAIL:  Key (email)=(a@b.com) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: users.email' / 'NOT NULL constraint failed: users.name'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>[\w.]+(?:,\s*[\w.]+)*)',
                  msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # "Duplicate entry 'a@b.com' for key 'users.uq_users_email'"
    m = re.search(r"Duplicate entry .* for key '([^']+)'", msg, flags=re.IGNORECASE)
    if m:
        return [m.group(1)]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite, MySQL).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)
    if not msg:
        return None

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols
    return None


def describe_integrity_error(exc: IntegrityError) -> dict:
    """
    Structured, log-safe description of an IntegrityError:
    {"constraint_kind": "unique", "constraint": "uq_users_email", "fields": ["email"]}
    """
    kind, constraint_name = classify_integrity_error(exc)
    return {
        "constraint_kind": kind.value,
        "constraint": constraint_name,
        "fields": extract_columns_from_integrity(exc),
    }


def is_unique_violation(exc: BaseException | None, field: str | None = None) -> bool:
    """
    True when `exc` is an IntegrityError caused by a unique constraint,
    optionally restricted to a given column (or a constraint naming it).
    """
    if not isinstance(exc, IntegrityError):
        return False

    kind, constraint_name = classify_integrity_error(exc)
    if kind is not ConstraintKind.UNIQUE:
        return False
    if field is None:
        return True

    columns = extract_columns_from_integrity(exc) or []
    if any(field == c or c.endswith(f"_{field}") for c in columns):
        return True
    return bool(constraint_name and constraint_name.endswith(f"_{field}"))
