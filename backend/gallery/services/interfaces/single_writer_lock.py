"""
Single-writer strategy - nothing to acquire per key.
Relies on the database serializing all write transactions.
"""

from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from gallery.services.interfaces.write_lock import LockKey, WriteLock


class SingleWriterLock(WriteLock):
    """
    No per-key locking - the transaction already owns the writer.

    SQLite sessions open every transaction with BEGIN IMMEDIATE
    (see gallery.db.session), so by the time the conflict check runs no
    other connection can commit until we are done.
    """

    async def acquire(self, db: AsyncSession, keys: Iterable[LockKey]) -> None:
        pass
