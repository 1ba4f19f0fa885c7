"""
Tests for location availability checks.
"""

from datetime import date

import pytest

from gallery.core.exceptions import ConflictError, ReferenceNotFoundError, ValidationError
from gallery.schemas import ExhibitionUpdate
from gallery.services.exhibition_service import (
    check_availability,
    delete_exhibition,
    update_exhibition,
)

JUNE_1 = date(2024, 6, 1)
JUNE_10 = date(2024, 6, 10)


@pytest.mark.asyncio
async def test_empty_location_is_available(sessions, location):
    result = await check_availability(sessions, location.id, JUNE_1, JUNE_10)
    assert result.available is True
    assert result.conflict_count == 0
    assert result.location_id == location.id


@pytest.mark.asyncio
async def test_availability_agrees_with_create(sessions, book, location):
    await book(JUNE_1, JUNE_10)
    await book(date(2024, 6, 20), date(2024, 6, 25))

    cases = [
        (date(2024, 5, 25), JUNE_1),
        (JUNE_10, date(2024, 6, 12)),
        (date(2024, 6, 11), date(2024, 6, 19)),
        (date(2024, 6, 5), date(2024, 6, 22)),
        (date(2024, 6, 26), date(2024, 7, 1)),
    ]
    for start, end in cases:
        result = await check_availability(sessions, location.id, start, end)
        if result.available:
            created = await book(start, end)
            assert created.id is not None
            # Put the range back so later cases see the same bookings
            await delete_exhibition(sessions, created.id)
        else:
            assert result.conflict_count >= 1
            with pytest.raises(ConflictError):
                await book(start, end)


@pytest.mark.asyncio
async def test_counts_every_overlap(sessions, book, location):
    await book(JUNE_1, date(2024, 6, 5))
    await book(date(2024, 6, 8), JUNE_10)

    result = await check_availability(sessions, location.id, date(2024, 5, 1), date(2024, 7, 1))
    assert result.available is False
    assert result.conflict_count == 2


@pytest.mark.asyncio
async def test_completed_ignored(sessions, book, location):
    await book(JUNE_1, JUNE_10, status="completed")
    result = await check_availability(sessions, location.id, JUNE_1, JUNE_10)
    assert result.available is True


@pytest.mark.asyncio
async def test_exclude_id_skips_own_booking(sessions, book, location):
    exhibition = await book(JUNE_1, JUNE_10)
    new_end = date(2024, 6, 14)

    blocked = await check_availability(sessions, location.id, JUNE_1, new_end)
    assert blocked.available is False

    own = await check_availability(
        sessions, location.id, JUNE_1, new_end, exclude_id=exhibition.id
    )
    assert own.available is True

    updated = await update_exhibition(sessions, exhibition.id, ExhibitionUpdate(end_date=new_end))
    assert updated.end_date == new_end


@pytest.mark.asyncio
async def test_invalid_range_rejected(sessions, location):
    with pytest.raises(ValidationError):
        await check_availability(sessions, location.id, JUNE_10, JUNE_1)


@pytest.mark.asyncio
async def test_unknown_location_rejected(sessions):
    with pytest.raises(ReferenceNotFoundError):
        await check_availability(sessions, 999, JUNE_1, JUNE_10)
