"""
Transaction gateway: the only place that opens sessions, begins, commits and
rolls back transactions.

Every repository operation is one call to `execute_in_transaction` with a
unit of work (an async callable receiving the session). The gateway never
raises for failures that happen inside the transaction; it returns a
`TransactionResult` that is either present (possibly holding None) or
failed with an `ErrorKind`.

Lifecycle of a single call:

    Idle -> HandleAcquired -> TransactionActive -> {Committed | RolledBack} -> HandleReleased
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from user_registry.exceptions.base import ErrorKind
from user_registry.exceptions.mapper import classify_failure, describe_integrity_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[AsyncSession], Awaitable[T]]
SessionFactory = Callable[[], AsyncSession]


@dataclass(frozen=True)
class TransactionResult(Generic[T]):
    """
    Outcome of one transaction.

    `present=True` means the unit of work completed and was committed; `value`
    is whatever it returned, including None. `present=False` means the
    transaction was rolled back; `error_kind` and `error` say why.
    """

    present: bool
    value: T | None = None
    error_kind: ErrorKind | None = None
    error: BaseException | None = None

    @classmethod
    def ok(cls, value: T | None) -> "TransactionResult[T]":
        return cls(present=True, value=value)

    @classmethod
    def failed(cls, kind: ErrorKind, error: BaseException) -> "TransactionResult[T]":
        return cls(present=False, error_kind=kind, error=error)

    def value_or(self, default: T) -> T:
        return self.value if self.present else default


class TransactionGateway:
    """
    Runs units of work inside a transaction.

    Args:
        session_factory: callable returning a new AsyncSession, normally
            `Database.new_session`, which refuses once the database is disposed.
            Each call gets its own session; sessions are never shared between calls.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def execute_in_transaction(
        self,
        unit_of_work: UnitOfWork[T],
        *,
        operation: str = "unit_of_work",
        context: dict[str, Any] | None = None,
    ) -> TransactionResult[T]:
        """
        Execute `unit_of_work(session)` in a new transaction.

        Args:
            unit_of_work: async callable; may raise BusinessRuleError to abort.
            operation: short name used in logs (e.g. "user.create").
            context: values logged alongside failures (e.g. the offending email).

        Returns:
            TransactionResult.ok(value) after commit, otherwise
            TransactionResult.failed(kind, error) after rollback.
        """
        transaction: AsyncSessionTransaction | None = None
        start = time.perf_counter()

        try:
            session = self._session_factory()
        except Exception as exc:
            kind = classify_failure(exc)
            self._log_failure(kind, exc, operation, context)
            return TransactionResult.failed(kind, exc)

        async with session:
            try:
                transaction = await session.begin()
                value = await unit_of_work(session)
                await transaction.commit()
            except Exception as exc:
                await self._rollback_if_active(transaction, operation)
                kind = classify_failure(exc)
                self._log_failure(kind, exc, operation, context)
                return TransactionResult.failed(kind, exc)

        logger.debug(
            "gateway.committed",
            extra={
                "operation": operation,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return TransactionResult.ok(value)

    @staticmethod
    async def _rollback_if_active(transaction: AsyncSessionTransaction | None, operation: str) -> None:
        if transaction is None or not transaction.is_active:
            return
        try:
            await transaction.rollback()
            logger.debug("gateway.rolled_back", extra={"operation": operation})
        except Exception:
            logger.exception("gateway.rollback_failed", extra={"operation": operation})

    @staticmethod
    def _log_failure(kind: ErrorKind, exc: Exception, operation: str, context: dict[str, Any] | None) -> None:
        base = {"operation": operation, "error_kind": kind.value, "context": context or {}}

        if kind is ErrorKind.BUSINESS_RULE:
            # expected outcome of user input; no stack trace
            logger.info(
                "gateway.business_rule_abort",
                extra={**base, "error_code": getattr(exc, "error_code", None), "reason": str(exc)},
            )
        elif kind is ErrorKind.CONSTRAINT_VIOLATION and isinstance(exc, IntegrityError):
            logger.error(
                "gateway.constraint_violation",
                extra={**base, **describe_integrity_error(exc)},
                exc_info=exc,
            )
        elif kind is ErrorKind.UNEXPECTED:
            logger.error("gateway.unexpected_error", extra=base, exc_info=exc)
        else:
            logger.error("gateway.store_error", extra=base, exc_info=exc)
