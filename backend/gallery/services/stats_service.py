"""
Summary counts for the dashboard.
"""

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.models.artwork import Artwork
from gallery.models.exhibition import Exhibition, ExhibitionStatus
from gallery.models.location import Location
from gallery.schemas.stats import ExhibitionCounts, StatsSummary, TableCounts
from gallery.services.serialized_write import serialized_read


async def _count(db: AsyncSession, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    return (await db.execute(query)).scalar_one()


async def summary(
    sessions: async_sessionmaker[AsyncSession],
    on_date: Optional[date] = None,
) -> StatsSummary:
    """`current` counts by date range, `scheduled` by stored status."""
    today = on_date or date.today()

    async def work(db: AsyncSession) -> StatsSummary:
        artworks = await _count(db, Artwork)
        locations = await _count(db, Location)
        exhibitions = await _count(db, Exhibition)
        current = await _count(
            db, Exhibition, Exhibition.start_date <= today, Exhibition.end_date >= today
        )
        scheduled = await _count(
            db, Exhibition, Exhibition.status == ExhibitionStatus.SCHEDULED.value
        )
        return StatsSummary(
            tables=TableCounts(artworks=artworks, locations=locations, exhibitions=exhibitions),
            exhibitions=ExhibitionCounts(total=exhibitions, current=current, scheduled=scheduled),
        )

    return await serialized_read(sessions, "stats_summary", work)
