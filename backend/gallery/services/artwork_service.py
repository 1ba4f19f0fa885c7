"""
Artwork service handling CRUD operations.
Updates go through the optimistic concurrency guard, deletes through the
referential guard.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.core.exceptions import NotFoundError, ValidationError
from gallery.core.logging import get_logger
from gallery.db.base import utcnow
from gallery.models.artwork import Artwork
from gallery.schemas.artwork import ArtworkCreate, ArtworkUpdate
from gallery.services.concurrency import check_version, load_for_update, next_version
from gallery.services.guards import EntityKind, ensure_deletable, lock_key
from gallery.services.serialized_write import serialized_read, serialized_write

logger = get_logger(__name__)


def _required_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return cleaned


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


async def list_artworks(sessions: async_sessionmaker[AsyncSession]) -> list[Artwork]:
    async def work(db: AsyncSession) -> list[Artwork]:
        result = await db.execute(
            select(Artwork).order_by(Artwork.created_at.desc(), Artwork.id.desc())
        )
        return list(result.scalars().all())

    return await serialized_read(sessions, "list_artworks", work)


async def get_artwork(sessions: async_sessionmaker[AsyncSession], artwork_id: int) -> Artwork:
    async def work(db: AsyncSession) -> Artwork:
        artwork = await db.get(Artwork, artwork_id)
        if artwork is None:
            raise NotFoundError("artwork", artwork_id)
        return artwork

    return await serialized_read(sessions, "get_artwork", work)


async def create_artwork(
    sessions: async_sessionmaker[AsyncSession],
    data: ArtworkCreate,
) -> Artwork:
    title = _required_text(data.title, "title")
    artist = _required_text(data.artist, "artist")
    detail_url = _optional_text(data.detail_url)

    async def work(db: AsyncSession) -> Artwork:
        now = utcnow()
        artwork = Artwork(
            title=title,
            artist=artist,
            detail_url=detail_url,
            created_at=now,
            updated_at=now,
        )
        db.add(artwork)
        await db.flush()
        return artwork

    artwork = await serialized_write(sessions, "create_artwork", work)
    logger.info("artwork_created", artwork_id=artwork.id, title=artwork.title)
    return artwork


async def update_artwork(
    sessions: async_sessionmaker[AsyncSession],
    artwork_id: int,
    data: ArtworkUpdate,
) -> Artwork:
    changes = data.model_dump(exclude_unset=True, exclude={"updated_at"})

    async def work(db: AsyncSession) -> Artwork:
        artwork = await load_for_update(db, Artwork, artwork_id, "artwork")
        check_version("artwork", artwork_id, artwork.updated_at, data.updated_at)

        if "title" in changes:
            artwork.title = _required_text(changes["title"], "title")
        if "artist" in changes:
            artwork.artist = _required_text(changes["artist"], "artist")
        if "detail_url" in changes:
            artwork.detail_url = _optional_text(changes["detail_url"])
        artwork.updated_at = next_version(artwork.updated_at)
        await db.flush()
        return artwork

    artwork = await serialized_write(sessions, "update_artwork", work)
    logger.info("artwork_updated", artwork_id=artwork_id, fields=sorted(changes))
    return artwork


async def delete_artwork(sessions: async_sessionmaker[AsyncSession], artwork_id: int) -> None:
    """
    Delete an artwork unless a scheduled or active exhibition uses it.
    Completed exhibitions of the artwork are kept with artwork_id cleared.
    """

    async def work(db: AsyncSession) -> None:
        artwork = await load_for_update(db, Artwork, artwork_id, "artwork")
        await ensure_deletable(db, EntityKind.ARTWORK, artwork_id)
        await db.delete(artwork)

    await serialized_write(
        sessions,
        "delete_artwork",
        work,
        lock_keys=[lock_key(EntityKind.ARTWORK, artwork_id)],
    )
    logger.info("artwork_deleted", artwork_id=artwork_id)
