"""
PostgreSQL advisory-lock writer strategy.
Implements WriteLock with transaction-scoped advisory locks.

Why advisory locks and READ COMMITTED:
  The conflict check reads rows that may not exist yet, so there is no row
  to SELECT ... FOR UPDATE. Instead every writer touching a location takes
  pg_advisory_xact_lock(namespace, location_id) first. Under READ COMMITTED
  each later statement gets a fresh snapshot, so once the lock is held the
  conflict read sees everything committed by the previous holder.

  Under REPEATABLE READ the snapshot would be taken by the lock statement
  itself, before the wait ends, and the check could miss a competitor.

Timeouts:
  lock_timeout bounds the wait. Expiry raises SQLSTATE 55P03, which the
  conflict-checked transaction treats as transient and retries.
"""

from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.core.config import get_settings
from gallery.core.logging import get_logger
from gallery.services.interfaces.write_lock import LockKey, WriteLock, ordered_keys

logger = get_logger(__name__)


class AdvisoryWriteLock(WriteLock):
    """
    Per-key writer serialization.

    Use when:
    - Storage allows concurrent writers (PostgreSQL)
    - Writers on different locations should not block each other
    """

    def __init__(self, lock_timeout_ms: Optional[int] = None):
        self.lock_timeout_ms = lock_timeout_ms or get_settings().LOCK_TIMEOUT_MS

    async def acquire(self, db: AsyncSession, keys: Iterable[LockKey]) -> None:
        keys = ordered_keys(keys)
        if not keys:
            return

        # SET does not take bind parameters
        await db.execute(text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'"))
        for namespace, key_id in keys:
            await db.execute(
                text("SELECT pg_advisory_xact_lock(:namespace, :key_id)"),
                {"namespace": int(namespace), "key_id": key_id},
            )
        logger.debug("write_lock_acquired", keys=[f"{ns.name.lower()}:{i}" for ns, i in keys])
