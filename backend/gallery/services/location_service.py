"""
Location service handling CRUD operations.
"""

from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.core.config import get_settings
from gallery.core.exceptions import NotFoundError, ValidationError
from gallery.core.logging import get_logger
from gallery.db.base import utcnow
from gallery.models.location import Location
from gallery.schemas.location import LocationCreate, LocationUpdate
from gallery.services.concurrency import check_version, load_for_update, next_version
from gallery.services.guards import EntityKind, ensure_deletable, lock_key
from gallery.services.interfaces.write_lock import LockNamespace
from gallery.services.serialized_write import serialized_read, serialized_write

logger = get_logger(__name__)

# Every location create takes this key, so explicit and generated ids
# never race each other for the same value
CREATE_LOCK_KEY = (LockNamespace.LOCATION_IDS, 0)

_ADVANCE_SEQUENCE = text(
    "SELECT setval(pg_get_serial_sequence('locations', 'id'), GREATEST("
    "(SELECT COALESCE(MAX(id), 1) FROM locations), "
    "COALESCE(pg_sequence_last_value(pg_get_serial_sequence('locations', 'id')::regclass), 1)"
    "))"
)


async def advance_location_sequence(db: AsyncSession) -> None:
    """
    Move the PostgreSQL id sequence past any explicitly inserted id.
    It never moves backwards. SQLite needs nothing: AUTOINCREMENT follows MAX(id).
    """
    if db.bind.dialect.name == "postgresql":
        await db.execute(_ADVANCE_SEQUENCE)


def validate_dimensions(width: int, height: int) -> None:
    limit = get_settings().MAX_LOCATION_DIMENSION
    if width <= 0 or height <= 0:
        raise ValidationError("Width and height must be positive", width=width, height=height)
    if width > limit or height > limit:
        raise ValidationError(
            f"Width and height must be at most {limit}", width=width, height=height
        )


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


async def list_locations(sessions: async_sessionmaker[AsyncSession]) -> list[Location]:
    async def work(db: AsyncSession) -> list[Location]:
        result = await db.execute(select(Location).order_by(Location.id.asc()))
        return list(result.scalars().all())

    return await serialized_read(sessions, "list_locations", work)


async def get_location(sessions: async_sessionmaker[AsyncSession], location_id: int) -> Location:
    async def work(db: AsyncSession) -> Location:
        location = await db.get(Location, location_id)
        if location is None:
            raise NotFoundError("location", location_id)
        return location

    return await serialized_read(sessions, "get_location", work)


async def create_location(
    sessions: async_sessionmaker[AsyncSession],
    data: LocationCreate,
) -> Location:
    validate_dimensions(data.width, data.height)
    description = _clean_description(data.description)

    async def work(db: AsyncSession) -> Location:
        if data.id is not None and await db.get(Location, data.id) is not None:
            raise ValidationError(f"Location {data.id} already exists", location_id=data.id)
        now = utcnow()
        location = Location(
            id=data.id,
            width=data.width,
            height=data.height,
            description=description,
            created_at=now,
            updated_at=now,
        )
        db.add(location)
        await db.flush()
        if data.id is not None:
            await advance_location_sequence(db)
        return location

    location = await serialized_write(
        sessions, "create_location", work, lock_keys=[CREATE_LOCK_KEY]
    )
    logger.info("location_created", location_id=location.id, width=location.width, height=location.height)
    return location


async def update_location(
    sessions: async_sessionmaker[AsyncSession],
    location_id: int,
    data: LocationUpdate,
) -> Location:
    changes = data.model_dump(exclude_unset=True, exclude={"updated_at"})

    async def work(db: AsyncSession) -> Location:
        location = await load_for_update(db, Location, location_id, "location")
        check_version("location", location_id, location.updated_at, data.updated_at)

        width = location.width if changes.get("width") is None else changes["width"]
        height = location.height if changes.get("height") is None else changes["height"]
        validate_dimensions(width, height)

        location.width = width
        location.height = height
        if "description" in changes:
            location.description = _clean_description(changes["description"])
        location.updated_at = next_version(location.updated_at)
        await db.flush()
        return location

    location = await serialized_write(sessions, "update_location", work)
    logger.info("location_updated", location_id=location_id, fields=sorted(changes))
    return location


async def delete_location(sessions: async_sessionmaker[AsyncSession], location_id: int) -> None:
    """
    Delete a location unless a scheduled or active exhibition occupies it.
    Completed exhibitions held there are kept with location_id cleared.
    """

    async def work(db: AsyncSession) -> None:
        location = await load_for_update(db, Location, location_id, "location")
        await ensure_deletable(db, EntityKind.LOCATION, location_id)
        await db.delete(location)

    await serialized_write(
        sessions,
        "delete_location",
        work,
        lock_keys=[lock_key(EntityKind.LOCATION, location_id)],
    )
    logger.info("location_deleted", location_id=location_id)
