"""
TransactionRunner -- commit-or-retry boundary for one unit of work.

Responsibility:
    Run a unit of work in a fresh session, commit it, and retry the whole
    unit from scratch when the commit conflicts with a concurrent writer.
    This is the only place in the kernel that calls ``session.commit()``.

Invariants enforced:
    - Each attempt gets its own session; nothing read in a failed attempt
      is reused by the next one.
    - A failed attempt is rolled back before anything else happens, so an
      abandoned or failed operation leaves no trace.
    - Domain errors are never retried: they propagate unchanged after the
      rollback.
    - Retries are bounded by ``max_attempts`` with linear backoff.

Retryable conditions:
    - ``StaleDataError``: a version-counted row changed since it was read.
    - ``OperationalError`` reporting a deadlock, a serialization failure,
      or a locked SQLite database.

Failure modes:
    - ConcurrencyConflictError once ``max_attempts`` conflicts in a row.
    - PersistenceError for any other SQLAlchemyError (logged with the
      original exception chained).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from inventory_kernel.exceptions import (
    ConcurrencyConflictError,
    InventoryKernelError,
    PersistenceError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.transaction_runner")

T = TypeVar("T")

_RETRYABLE_MESSAGES = (
    "deadlock",
    "could not serialize",
    "database is locked",
)


def is_retryable_error(exc: BaseException) -> bool:
    """True for conflicts that a fresh attempt can resolve."""
    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return any(m in message for m in _RETRYABLE_MESSAGES)
    return False


@dataclass(frozen=True)
class TransactionOutcome(Generic[T]):
    value: T
    attempts: int


class TransactionRunner:
    """
    Owns the transaction boundary for write operations.

    Args:
        session_factory: Callable returning a new Session.
        max_attempts: Total attempts before giving up on conflicts.
        backoff_seconds: Sleep before retry ``n`` is ``backoff_seconds * n``.
        sleep: Injectable sleep (tests pass a no-op).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_attempts: int = 5,
        backoff_seconds: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._backoff = backoff_seconds
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def run(
        self,
        operation: str,
        entity_id: object,
        work: Callable[[Session], T],
    ) -> TransactionOutcome[T]:
        """
        Execute ``work(session)`` and commit, retrying on conflicts.

        Raises:
            InventoryKernelError: Whatever the work raised (not retried).
            ConcurrencyConflictError: Conflicts on every attempt.
            PersistenceError: Non-retryable database failure.
        """
        attempt = 0
        while True:
            attempt += 1
            session = self._session_factory()
            try:
                value = work(session)
                session.commit()
                logger.info("transaction_committed", extra={
                    "operation": operation,
                    "entity_id": str(entity_id),
                    "attempts": attempt,
                })
                return TransactionOutcome(value=value, attempts=attempt)
            except InventoryKernelError:
                session.rollback()
                logger.info("transaction_rejected", extra={
                    "operation": operation,
                    "entity_id": str(entity_id),
                    "attempt": attempt,
                }, exc_info=True)
                raise
            except SQLAlchemyError as exc:
                session.rollback()
                if not is_retryable_error(exc):
                    logger.error("transaction_failed", extra={
                        "operation": operation,
                        "entity_id": str(entity_id),
                        "attempt": attempt,
                    }, exc_info=True)
                    raise PersistenceError(operation, str(exc)) from exc
                if attempt >= self._max_attempts:
                    logger.error("transaction_conflict_exhausted", extra={
                        "operation": operation,
                        "entity_id": str(entity_id),
                        "attempts": attempt,
                    })
                    raise ConcurrencyConflictError(
                        operation, str(entity_id), attempt
                    ) from exc
                logger.warning("transaction_conflict_retry", extra={
                    "operation": operation,
                    "entity_id": str(entity_id),
                    "attempt": attempt,
                    "max_attempts": self._max_attempts,
                    "error_type": type(exc).__name__,
                })
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

            if self._backoff:
                self._sleep(self._backoff * attempt)
