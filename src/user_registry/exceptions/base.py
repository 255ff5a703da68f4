"""
Custom exceptions for repository-related operations.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """
    Closed set of failure kinds produced at the transaction boundary.

    - BUSINESS_RULE: a BusinessRuleError raised on purpose by a unit of work
    - CONSTRAINT_VIOLATION: the database rejected the write (IntegrityError)
    - TRANSIENT_STORE_ERROR: low-level connectivity fault (server gone, pool timeout)
    - FATAL_STORE_ERROR: any other SQLAlchemy / driver error
    - UNEXPECTED: everything else
    """

    BUSINESS_RULE = "business_rule"
    CONSTRAINT_VIOLATION = "constraint_violation"
    TRANSIENT_STORE_ERROR = "transient_store_error"
    FATAL_STORE_ERROR = "fatal_store_error"
    UNEXPECTED = "unexpected"


class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to end users)
    - fields: optional list of field names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'not_found')
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base


class BusinessRuleError(RepositoryError):
    """
    Raised from inside a unit of work to abort its transaction on purpose.

    The gateway rolls back and reports ErrorKind.BUSINESS_RULE; repositories
    re-raise the original error so callers can render it with its detail.
    """


class NotFoundError(BusinessRuleError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateEmailError(BusinessRuleError):
    def __init__(self, email: str, *, constraint: str | None = None):
        super().__init__(f"Email {email} already exists", fields=["email"],
                         constraint=constraint, error_code="duplicate")
        self.email = email


class StoreError(RepositoryError):
    """
    Store-level failure surfaced past the repository.

    The message is generic; the driver error stays on __cause__ for logs.
    """

    def __init__(self, message: str, *, kind: ErrorKind):
        super().__init__(message, error_code="store_error")
        self.kind = kind


__all__ = [
    "ErrorKind",
    "RepositoryError",
    "BusinessRuleError",
    "NotFoundError",
    "DuplicateEmailError",
    "StoreError",
]
