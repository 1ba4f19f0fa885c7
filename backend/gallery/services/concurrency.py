"""
Optimistic concurrency guard shared by exhibition, artwork and location updates.

Clients send back the `updated_at` they last read. If the stored value has
moved on, someone else saved in between and the update is refused with
StaleWriteError; the client must re-fetch before retrying. Omitting the
token skips the check.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.core.exceptions import NotFoundError, StaleWriteError
from gallery.core.logging import get_logger
from gallery.db.base import as_utc, utcnow

logger = get_logger(__name__)

VERSION_STEP = timedelta(microseconds=1)


async def load_for_update(db: AsyncSession, model, entity_id: int, entity: str):
    """
    Fetch a row and lock it until the transaction ends.

    Two updates of the same row therefore run one after the other, and the
    second one sees the first one's version token.
    """
    result = await db.execute(
        select(model).where(model.id == entity_id).with_for_update(of=model)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(entity, entity_id)
    return row


def check_version(
    entity: str,
    entity_id: int,
    stored: datetime,
    expected: Optional[datetime],
) -> None:
    if expected is None:
        return
    if as_utc(stored) != as_utc(expected):
        logger.info(
            "stale_write_rejected",
            entity=entity,
            entity_id=entity_id,
            stored=as_utc(stored).isoformat(),
            expected=as_utc(expected).isoformat(),
        )
        raise StaleWriteError(entity, entity_id)


def next_version(previous: Optional[datetime]) -> datetime:
    """Current UTC time, nudged forward so tokens strictly increase."""
    now = utcnow()
    if previous is not None and now <= as_utc(previous):
        return as_utc(previous) + VERSION_STEP
    return now
