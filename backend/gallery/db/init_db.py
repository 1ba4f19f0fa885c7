"""
Schema bootstrap and seed data.

Runs once in the application lifespan, before the first request is served:
tables, then locations, then artworks, then exhibitions. Each step is
awaited in turn because exhibitions reference the rows created before
them. Seeding is skipped per table when the table already has rows.

Production deployments create the schema with Alembic; create_all is a
no-op against tables that already exist.
"""

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gallery.core.logging import get_logger
from gallery.db.base import Base, utcnow
from gallery.models import Artwork, Exhibition, Location
from gallery.services.location_service import advance_location_sequence

logger = get_logger(__name__)

INITIAL_LOCATIONS = [
    {"id": 1, "width": 100, "height": 80, "description": "Entrance, facing wall"},
    {"id": 2, "width": 120, "height": 90, "description": "Main hall, left side"},
    {"id": 3, "width": 80, "height": 100, "description": "Main hall, right side"},
    {"id": 4, "width": 150, "height": 120, "description": "Room A, centre"},
    {"id": 5, "width": 90, "height": 70, "description": "Room A, left wall"},
    {"id": 6, "width": 90, "height": 70, "description": "Room A, right wall"},
    {"id": 7, "width": 200, "height": 150, "description": "Room B, large works"},
    {"id": 8, "width": 100, "height": 80, "description": "Room B, small works"},
    {"id": 9, "width": 110, "height": 85, "description": "Corridor display"},
    {"id": 10, "width": 60, "height": 80, "description": "Cafe corner"},
]

INITIAL_ARTWORKS = [
    {"title": "Street Corner at Dusk", "artist": "Ichiro Tanaka", "detail_url": "https://example.com/artwork1"},
    {"title": "Silent Forest", "artist": "Hanako Sato", "detail_url": "https://example.com/artwork2"},
    {"title": "Pulse of the City", "artist": "Taro Yamada", "detail_url": "https://example.com/artwork3"},
    {"title": "Memory of the Sea", "artist": "Misaki Suzuki", "detail_url": "https://example.com/artwork4"},
    {"title": "Dialogue of Light and Shadow", "artist": "Kenji Takahashi", "detail_url": "https://example.com/artwork5"},
]


def initial_exhibitions(year: int) -> list[dict]:
    """(artwork index, location id, start, end, status, notes) for one year."""
    return [
        {"artwork": 0, "location_id": 1, "start_date": date(year, 1, 1), "end_date": date(year, 1, 31),
         "status": "completed", "notes": "New Year special display"},
        {"artwork": 1, "location_id": 2, "start_date": date(year, 2, 1), "end_date": date(year, 2, 28),
         "status": "completed", "notes": "Winter programme"},
        {"artwork": 2, "location_id": 1, "start_date": date(year, 6, 1), "end_date": date(year, 7, 31),
         "status": "active", "notes": "Summer special display"},
        {"artwork": 3, "location_id": 3, "start_date": date(year, 8, 1), "end_date": date(year, 8, 31),
         "status": "scheduled", "notes": "Summer programme"},
        {"artwork": 4, "location_id": 4, "start_date": date(year, 9, 1), "end_date": date(year, 9, 30),
         "status": "scheduled", "notes": "Autumn programme"},
    ]


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("tables_ready", tables=sorted(Base.metadata.tables))


async def _is_empty(db: AsyncSession, model) -> bool:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one() == 0


async def seed_locations(db: AsyncSession) -> int:
    if not await _is_empty(db, Location):
        return 0
    now = utcnow()
    db.add_all([Location(**row, created_at=now, updated_at=now) for row in INITIAL_LOCATIONS])
    await db.flush()
    await advance_location_sequence(db)
    return len(INITIAL_LOCATIONS)


async def seed_artworks(db: AsyncSession) -> list[int]:
    if not await _is_empty(db, Artwork):
        return []
    now = utcnow()
    artworks = [Artwork(**row, created_at=now, updated_at=now) for row in INITIAL_ARTWORKS]
    db.add_all(artworks)
    await db.flush()
    return [artwork.id for artwork in artworks]


async def seed_exhibitions(db: AsyncSession, artwork_ids: list[int], year: int) -> int:
    if not artwork_ids or not await _is_empty(db, Exhibition):
        return 0
    now = utcnow()
    rows = initial_exhibitions(year)
    for row in rows:
        row = dict(row)
        artwork_id = artwork_ids[row.pop("artwork")]
        db.add(Exhibition(artwork_id=artwork_id, **row, created_at=now, updated_at=now))
    await db.flush()
    return len(rows)


async def seed_initial_data(
    sessions: async_sessionmaker[AsyncSession],
    today: Optional[date] = None,
) -> None:
    year = (today or date.today()).year
    async with sessions() as db:
        async with db.begin():
            locations = await seed_locations(db)
            artwork_ids = await seed_artworks(db)
            exhibitions = await seed_exhibitions(db, artwork_ids, year)
    logger.info(
        "seed_complete",
        locations=locations,
        artworks=len(artwork_ids),
        exhibitions=exhibitions,
    )


async def init_db(
    engine: AsyncEngine,
    sessions: async_sessionmaker[AsyncSession],
    seed: bool = True,
) -> None:
    await create_tables(engine)
    if seed:
        await seed_initial_data(sessions)
