"""
Tests for the referential guard on artwork and location deletion.
"""

from datetime import date

import pytest

from gallery.core.exceptions import NotFoundError, ReferentialConflictError, ValidationError
from gallery.schemas import ExhibitionUpdate
from gallery.services.artwork_service import delete_artwork, get_artwork
from gallery.services.exhibition_service import (
    delete_exhibition,
    get_exhibition,
    update_exhibition,
)
from gallery.services.guards import EntityKind, guard_entity_deletion
from gallery.services.location_service import delete_location, get_location

START = date(2024, 6, 1)
END = date(2024, 6, 10)


@pytest.mark.asyncio
async def test_artwork_with_scheduled_exhibition_not_deletable(sessions, book, artwork):
    await book(START, END)

    with pytest.raises(ReferentialConflictError) as exc_info:
        await delete_artwork(sessions, artwork.id)
    assert exc_info.value.reference_count == 1

    # Still there
    assert (await get_artwork(sessions, artwork.id)).id == artwork.id


@pytest.mark.asyncio
async def test_artwork_deletable_after_exhibition_deleted(sessions, book, artwork):
    exhibition = await book(START, END)
    await delete_exhibition(sessions, exhibition.id)

    await delete_artwork(sessions, artwork.id)
    with pytest.raises(NotFoundError):
        await get_artwork(sessions, artwork.id)


@pytest.mark.asyncio
async def test_artwork_deletable_after_exhibition_completed(sessions, book, artwork):
    exhibition = await book(START, END)
    await update_exhibition(sessions, exhibition.id, ExhibitionUpdate(status="completed"))

    await delete_artwork(sessions, artwork.id)

    # Completed history outlives the artwork
    kept = await get_exhibition(sessions, exhibition.id)
    assert kept.status == "completed"
    assert kept.artwork_id is None
    assert kept.artwork is None
    assert kept.location_id == exhibition.location_id


@pytest.mark.asyncio
async def test_location_with_active_exhibition_not_deletable(sessions, book, location):
    await book(START, END, status="active")

    with pytest.raises(ReferentialConflictError):
        await delete_location(sessions, location.id)
    assert (await get_location(sessions, location.id)).id == location.id


@pytest.mark.asyncio
async def test_location_deletable_with_only_completed(sessions, book, location, artwork):
    exhibition = await book(START, END, status="completed")

    await delete_location(sessions, location.id)
    with pytest.raises(NotFoundError):
        await get_location(sessions, location.id)
    # The artwork and the completed exhibition are untouched
    assert (await get_artwork(sessions, artwork.id)).title == artwork.title
    kept = await get_exhibition(sessions, exhibition.id)
    assert kept.location_id is None
    assert kept.location is None
    assert kept.artwork_id == artwork.id
    assert (kept.start_date, kept.end_date) == (START, END)


@pytest.mark.asyncio
async def test_completed_exhibition_without_location_needs_one_to_update(
    sessions, book, location, other_location
):
    exhibition = await book(START, END, status="completed")
    await delete_location(sessions, location.id)

    with pytest.raises(ValidationError):
        await update_exhibition(sessions, exhibition.id, ExhibitionUpdate(notes="archived"))

    moved = await update_exhibition(
        sessions, exhibition.id, ExhibitionUpdate(location_id=other_location.id)
    )
    assert moved.location_id == other_location.id
    assert moved.location.id == other_location.id


@pytest.mark.asyncio
async def test_guard_counts_only_live_references(sessions, book, other_location, artwork):
    await book(START, END, status="completed")
    await book(START, END, location_id=other_location.id)

    with pytest.raises(ReferentialConflictError) as exc_info:
        await guard_entity_deletion(sessions, EntityKind.ARTWORK, artwork.id)
    assert exc_info.value.reference_count == 1

    # Nothing is deleted by the standalone check
    assert (await get_artwork(sessions, artwork.id)).id == artwork.id


@pytest.mark.asyncio
async def test_guard_passes_for_unreferenced(sessions, location):
    await guard_entity_deletion(sessions, EntityKind.LOCATION, location.id)
    await guard_entity_deletion(sessions, "artwork", 12345)


@pytest.mark.asyncio
async def test_delete_missing_entities(sessions):
    with pytest.raises(NotFoundError):
        await delete_artwork(sessions, 404)
    with pytest.raises(NotFoundError):
        await delete_location(sessions, 404)
