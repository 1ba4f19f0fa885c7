"""
Conflict-checked transactions.

CONCURRENCY STRATEGY: Serialized writers per location, bounded retry
====================================================================

Problem:
  Two curators book the same wall for overlapping weeks at the same time.
  Both read "no conflicting exhibition", both insert, both succeed.
  Result: a double-booked location.

Solution:
  Every mutation runs through serialized_write():

  1. Open a fresh session and BEGIN
  2. Take the writer lock for each (namespace, id) key the write touches
     - SQLite: BEGIN IMMEDIATE already holds the single database writer
     - PostgreSQL: pg_advisory_xact_lock per key, sorted to avoid deadlocks
  3. Run the check and the write inside that transaction
  4. COMMIT, releasing the locks

  If taking the lock times out or the database reports a serialization
  failure or deadlock, the whole transaction is rolled back and retried
  with exponential backoff. After WRITE_RETRY_ATTEMPTS the caller gets
  TransientStorageError. The check is never skipped and a write is never
  dropped silently.

  A cancelled caller unwinds through the session context managers, which
  roll the transaction back and release any advisory lock with it.

Domain errors raised by the work function (ConflictError, StaleWriteError,
...) roll back and propagate unchanged. They are not retried.

Reads go through serialized_read(): no writer locks, same retry bound and
the same wrapping of storage errors.
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.core.config import get_settings
from gallery.core.exceptions import TransientStorageError, UnexpectedStorageError
from gallery.core.logging import get_logger
from gallery.core.metrics import record_write_failure, record_write_retry, write_latency
from gallery.services.interfaces.write_lock import LockKey
from gallery.services.strategy_factory import get_lock_for

logger = get_logger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})
SQLITE_BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")


def is_transient(exc: SQLAlchemyError) -> bool:
    """True for contention errors that a fresh attempt may not hit."""
    if isinstance(exc, PoolTimeoutError):
        return True
    if not isinstance(exc, DBAPIError):
        return False

    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in TRANSIENT_SQLSTATES:
        return True

    message = str(orig).lower()
    return any(marker in message for marker in SQLITE_BUSY_MARKERS)


def backoff_delay(attempt: int, base: float, cap: float) -> float:
    """Exponential backoff with jitter: half fixed, half random."""
    delay = min(cap, base * (2 ** (attempt - 1)))
    return delay / 2 + random.uniform(0, delay / 2)


async def acquire_locks(db: AsyncSession, keys: Iterable[LockKey]) -> None:
    """Take more writer locks from inside a running serialized_write()."""
    lock = get_lock_for(db.bind.dialect.name)
    await lock.acquire(db, keys)


async def _run_with_retry(
    sessions: async_sessionmaker[AsyncSession],
    operation: str,
    work: Callable[[AsyncSession], Awaitable[T]],
    lock_keys: Iterable[LockKey] = (),
    attempts: Optional[int] = None,
) -> T:
    settings = get_settings()
    attempts = attempts or settings.WRITE_RETRY_ATTEMPTS
    lock_keys = list(lock_keys)
    started = time.perf_counter()

    try:
        for attempt in range(1, attempts + 1):
            try:
                async with sessions() as db:
                    async with db.begin():
                        await acquire_locks(db, lock_keys)
                        result = await work(db)
                return result

            except SQLAlchemyError as exc:
                if not is_transient(exc):
                    logger.error(
                        "serialized_write_failed",
                        operation=operation,
                        error=str(exc),
                    )
                    record_write_failure("unexpected")
                    raise UnexpectedStorageError(
                        f"Storage error during {operation}", operation=operation
                    ) from exc

                if attempt == attempts:
                    logger.warning(
                        "serialized_write_exhausted",
                        operation=operation,
                        attempts=attempts,
                        error=str(exc),
                    )
                    record_write_failure("transient")
                    raise TransientStorageError(attempts) from exc

                delay = backoff_delay(
                    attempt, settings.WRITE_RETRY_BASE_DELAY, settings.WRITE_RETRY_MAX_DELAY
                )
                logger.info(
                    "write_retry",
                    operation=operation,
                    attempt=attempt,
                    delay_ms=round(delay * 1000, 1),
                    reason="lock_contention",
                )
                record_write_retry(operation)
                await asyncio.sleep(delay)

        # Should not reach here, but just in case
        raise TransientStorageError(attempts)
    finally:
        write_latency.labels(operation=operation).observe(time.perf_counter() - started)


async def serialized_write(
    sessions: async_sessionmaker[AsyncSession],
    operation: str,
    work: Callable[[AsyncSession], Awaitable[T]],
    lock_keys: Iterable[LockKey] = (),
    attempts: Optional[int] = None,
) -> T:
    """
    Run `work` in one atomic transaction holding the writer locks.

    `work` may be invoked more than once (once per attempt) and must not
    keep state between calls. Whatever it returns is returned after the
    commit succeeds.
    """
    return await _run_with_retry(sessions, operation, work, lock_keys, attempts)


async def serialized_read(
    sessions: async_sessionmaker[AsyncSession],
    operation: str,
    work: Callable[[AsyncSession], Awaitable[T]],
    attempts: Optional[int] = None,
) -> T:
    """
    Run a read-only `work` with the same retry and error wrapping as writes.

    On SQLite a read still opens with BEGIN IMMEDIATE and can wait behind a
    writer; that wait surfaces as TransientStorageError, never as a raw
    driver exception.
    """
    return await _run_with_retry(sessions, operation, work, attempts=attempts)
