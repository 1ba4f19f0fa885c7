"""
Tests for startup seeding.
"""

from datetime import date

import pytest

from gallery.db.init_db import INITIAL_ARTWORKS, INITIAL_LOCATIONS, init_db, seed_initial_data
from gallery.schemas import LocationCreate
from gallery.services.exhibition_service import check_availability, list_exhibitions
from gallery.services.location_service import create_location, list_locations
from gallery.services.stats_service import summary


@pytest.mark.asyncio
async def test_seed_populates_empty_database(sessions):
    await seed_initial_data(sessions, today=date(2024, 3, 1))

    stats = await summary(sessions, on_date=date(2024, 6, 15))
    assert stats.tables.locations == len(INITIAL_LOCATIONS)
    assert stats.tables.artworks == len(INITIAL_ARTWORKS)
    assert stats.tables.exhibitions == 5
    assert stats.exhibitions.current == 1
    assert stats.exhibitions.scheduled == 2


@pytest.mark.asyncio
async def test_seed_is_idempotent(engine, sessions):
    await init_db(engine, sessions, seed=True)
    await init_db(engine, sessions, seed=True)

    assert len(await list_locations(sessions)) == len(INITIAL_LOCATIONS)
    assert len(await list_exhibitions(sessions)) == 5


@pytest.mark.asyncio
async def test_seeded_bookings_are_enforced(sessions):
    await seed_initial_data(sessions, today=date(2024, 3, 1))

    # Location 1 holds an active summer exhibition and a completed January one
    summer = await check_availability(sessions, 1, date(2024, 7, 1), date(2024, 7, 5))
    assert summer.available is False
    january = await check_availability(sessions, 1, date(2024, 1, 10), date(2024, 1, 20))
    assert january.available is True


@pytest.mark.asyncio
async def test_new_location_after_seed_gets_next_id(sessions):
    await seed_initial_data(sessions, today=date(2024, 3, 1))

    created = await create_location(sessions, LocationCreate(width=50, height=50))
    assert created.id == max(row["id"] for row in INITIAL_LOCATIONS) + 1
