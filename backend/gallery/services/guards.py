"""
Referential guard for artwork and location deletion.

An artwork or location may not be deleted while a scheduled or active
exhibition points at it. Nothing is cleaned up to make room for a delete:
it is simply refused. Completed exhibitions never block; they outlive the
delete with the reference set to NULL by the foreign key.
"""

import enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.core.exceptions import ReferentialConflictError
from gallery.core.logging import get_logger
from gallery.core.metrics import record_deletion_guard
from gallery.models.exhibition import Exhibition, LIVE_STATUSES
from gallery.services.interfaces.write_lock import LockKey, LockNamespace
from gallery.services.serialized_write import serialized_read

logger = get_logger(__name__)


class EntityKind(str, enum.Enum):
    ARTWORK = "artwork"
    LOCATION = "location"


_REFERENCE_COLUMNS = {
    EntityKind.ARTWORK: Exhibition.artwork_id,
    EntityKind.LOCATION: Exhibition.location_id,
}

_LOCK_NAMESPACES = {
    EntityKind.ARTWORK: LockNamespace.ARTWORK,
    EntityKind.LOCATION: LockNamespace.LOCATION,
}


def lock_key(kind: EntityKind, entity_id: int) -> LockKey:
    return (_LOCK_NAMESPACES[EntityKind(kind)], entity_id)


async def count_live_references(db: AsyncSession, kind: EntityKind, entity_id: int) -> int:
    column = _REFERENCE_COLUMNS[EntityKind(kind)]
    result = await db.execute(
        select(func.count())
        .select_from(Exhibition)
        .where(column == entity_id, Exhibition.status.in_(LIVE_STATUSES))
    )
    return result.scalar_one()


async def ensure_deletable(db: AsyncSession, kind: EntityKind, entity_id: int) -> None:
    """Raise ReferentialConflictError if live exhibitions reference the entity."""
    kind = EntityKind(kind)
    count = await count_live_references(db, kind, entity_id)
    record_deletion_guard(kind.value, allowed=count == 0)
    if count > 0:
        logger.warning(
            "deletion_blocked",
            entity=kind.value,
            entity_id=entity_id,
            live_references=count,
        )
        raise ReferentialConflictError(kind.value, entity_id, count)


async def guard_entity_deletion(
    sessions: async_sessionmaker[AsyncSession],
    kind: EntityKind,
    entity_id: int,
) -> None:
    """
    Standalone check for collaborators that delete on their own.

    The answer is only as fresh as this read; the artwork and location
    services repeat the check inside their delete transaction.
    """
    async def work(db: AsyncSession) -> None:
        await ensure_deletable(db, kind, entity_id)

    await serialized_read(sessions, "guard_entity_deletion", work)
