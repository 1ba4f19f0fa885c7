"""
Tests for artwork and location CRUD.
"""

from types import SimpleNamespace

import pytest

from gallery.core.exceptions import NotFoundError, StaleWriteError, ValidationError
from gallery.models import Artwork, Location
from gallery.schemas import ArtworkCreate, ArtworkUpdate, LocationCreate, LocationUpdate
from gallery.services.artwork_service import (
    create_artwork,
    get_artwork,
    list_artworks,
    update_artwork,
)
from gallery.services import location_service
from gallery.services.interfaces import LockNamespace
from gallery.services.location_service import (
    advance_location_sequence,
    create_location,
    list_locations,
    update_location,
)


@pytest.mark.asyncio
async def test_create_artwork_trims_fields(sessions):
    artwork = await create_artwork(sessions, ArtworkCreate(
        title="  Silent Forest ", artist=" Hanako Sato", detail_url="   ",
    ))
    assert artwork.title == "Silent Forest"
    assert artwork.artist == "Hanako Sato"
    assert artwork.detail_url is None


@pytest.mark.asyncio
async def test_artwork_requires_title_and_artist(sessions):
    with pytest.raises(ValidationError):
        await create_artwork(sessions, ArtworkCreate(title="   ", artist="Somebody"))
    with pytest.raises(ValidationError):
        await create_artwork(sessions, ArtworkCreate(title="Untitled", artist=""))


@pytest.mark.asyncio
async def test_artworks_listed_newest_first(sessions):
    first = await create_artwork(sessions, ArtworkCreate(title="One", artist="A"))
    second = await create_artwork(sessions, ArtworkCreate(title="Two", artist="B"))

    listed = await list_artworks(sessions)
    assert [a.id for a in listed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_artwork_update_and_stale_guard(sessions, artwork):
    updated = await update_artwork(
        sessions, artwork.id, ArtworkUpdate(title="Silent Forest II", updated_at=artwork.updated_at)
    )
    assert updated.title == "Silent Forest II"
    assert updated.artist == artwork.artist
    assert updated.updated_at > artwork.updated_at

    with pytest.raises(StaleWriteError):
        await update_artwork(
            sessions, artwork.id, ArtworkUpdate(title="Lost edit", updated_at=artwork.updated_at)
        )
    assert (await get_artwork(sessions, artwork.id)).title == "Silent Forest II"


@pytest.mark.asyncio
async def test_update_missing_artwork(sessions):
    with pytest.raises(NotFoundError):
        await update_artwork(sessions, 31337, ArtworkUpdate(title="x"))


@pytest.mark.asyncio
async def test_location_dimensions_validated(sessions):
    for width, height in ((0, 10), (10, -1), (1001, 10), (10, 1001)):
        with pytest.raises(ValidationError):
            await create_location(sessions, LocationCreate(width=width, height=height))

    edge = await create_location(sessions, LocationCreate(width=1, height=1000))
    assert (edge.width, edge.height) == (1, 1000)


@pytest.mark.asyncio
async def test_location_explicit_id(sessions):
    wall = await create_location(sessions, LocationCreate(id=42, width=100, height=80))
    assert wall.id == 42

    with pytest.raises(ValidationError):
        await create_location(sessions, LocationCreate(id=42, width=50, height=50))

    listed = await list_locations(sessions)
    assert [loc.id for loc in listed] == [42]


@pytest.mark.asyncio
async def test_locations_listed_by_id(sessions):
    await create_location(sessions, LocationCreate(id=7, width=10, height=10))
    await create_location(sessions, LocationCreate(id=3, width=10, height=10))

    assert [loc.id for loc in await list_locations(sessions)] == [3, 7]


@pytest.mark.asyncio
async def test_location_partial_update(sessions, location):
    updated = await update_location(sessions, location.id, LocationUpdate(width=200))
    assert updated.width == 200
    assert updated.height == location.height
    assert updated.description == location.description

    with pytest.raises(ValidationError):
        await update_location(sessions, location.id, LocationUpdate(height=5000))


@pytest.mark.asyncio
async def test_location_stale_update(sessions, location):
    await update_location(
        sessions, location.id, LocationUpdate(description="Repainted", updated_at=location.updated_at)
    )
    with pytest.raises(StaleWriteError):
        await update_location(
            sessions, location.id, LocationUpdate(width=10, updated_at=location.updated_at)
        )


class RecordingSession:
    """Stands in for an AsyncSession: records statements instead of running them."""

    def __init__(self, dialect):
        self.bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect))
        self.statements = []

    async def execute(self, statement, params=None):
        self.statements.append((str(statement), params))


@pytest.mark.asyncio
async def test_generated_id_follows_explicit_id(sessions):
    await create_location(sessions, LocationCreate(id=42, width=100, height=80))
    generated = await create_location(sessions, LocationCreate(width=60, height=60))
    assert generated.id > 42


@pytest.mark.asyncio
async def test_sequence_advanced_on_postgresql():
    db = RecordingSession("postgresql")
    await advance_location_sequence(db)

    [(sql, _)] = db.statements
    assert "setval(pg_get_serial_sequence('locations', 'id')" in sql
    # Never moves the sequence backwards
    assert "GREATEST(" in sql
    assert "MAX(id)" in sql


@pytest.mark.asyncio
async def test_sequence_untouched_on_sqlite():
    db = RecordingSession("sqlite")
    await advance_location_sequence(db)
    assert db.statements == []


@pytest.mark.asyncio
async def test_location_creates_share_one_lock(sessions, monkeypatch):
    seen = []
    real_write = location_service.serialized_write

    async def recording_write(sessions, operation, work, lock_keys=(), attempts=None):
        seen.append(list(lock_keys))
        return await real_write(sessions, operation, work, lock_keys, attempts)

    monkeypatch.setattr(location_service, "serialized_write", recording_write)

    await create_location(sessions, LocationCreate(id=5, width=10, height=10))
    await create_location(sessions, LocationCreate(width=10, height=10))

    assert seen == [[(LockNamespace.LOCATION_IDS, 0)], [(LockNamespace.LOCATION_IDS, 0)]]


def test_exhibition_collections_never_load():
    # Accessing them raises instead of issuing a query per artwork or location
    for model in (Artwork, Location):
        relationship = model.exhibitions.property
        assert relationship.lazy == "raise"
        assert relationship.passive_deletes is True
