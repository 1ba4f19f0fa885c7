"""
Writer lock strategy interface.
Lets the conflict-checked transaction serialize writers per location
without knowing which database it runs on.
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession


class LockNamespace(IntEnum):
    LOCATION = 1
    ARTWORK = 2
    # Single key (0) shared by every location create
    LOCATION_IDS = 3


LockKey = tuple[LockNamespace, int]


class WriteLock(ABC):
    """
    Interface for writer serialization strategies.

    Implementations:
    - SingleWriterLock: storage already has one global writer (SQLite)
    - AdvisoryWriteLock: per-key transaction-scoped locks (PostgreSQL)
    """

    @abstractmethod
    async def acquire(self, db: AsyncSession, keys: Iterable[LockKey]) -> None:
        """
        Block until this transaction holds the writer lock for every key.

        Must be called inside an open transaction; the lock is released
        when that transaction commits or rolls back.

        Args:
            db: Session with an open transaction
            keys: (namespace, id) pairs, e.g. (LockNamespace.LOCATION, 3)
        """
        pass


def ordered_keys(keys: Iterable[LockKey]) -> list[LockKey]:
    """Deduplicate and sort so every writer takes locks in the same order."""
    return sorted({(LockNamespace(ns), int(key_id)) for ns, key_id in keys})
