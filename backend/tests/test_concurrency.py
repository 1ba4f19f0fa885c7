"""
Concurrency tests: simultaneous writers against one location.

These run real transactions against a file database, so the writer lock
and the conflict check interleave the way they do under load.
"""

import asyncio
from datetime import date, timedelta

import pytest

from gallery.core.exceptions import ConflictError, StaleWriteError
from gallery.schemas import ExhibitionCreate, ExhibitionUpdate
from gallery.services.exhibition_service import (
    create_exhibition,
    list_exhibitions,
    update_exhibition,
)

START = date(2024, 6, 1)


@pytest.mark.asyncio
async def test_simultaneous_overlapping_creates_one_winner(sessions, artwork, location):
    """Ten curators book overlapping weeks at the same wall at once."""
    requests = [
        ExhibitionCreate(
            artwork_id=artwork.id,
            location_id=location.id,
            start_date=START + timedelta(days=i % 3),
            end_date=START + timedelta(days=7 + i % 3),
        )
        for i in range(10)
    ]

    results = await asyncio.gather(
        *(create_exhibition(sessions, r) for r in requests),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(e, ConflictError) for e in losers), losers

    stored = await list_exhibitions(sessions)
    assert [e.id for e in stored] == [winners[0].id]


@pytest.mark.asyncio
async def test_simultaneous_disjoint_creates_all_succeed(sessions, artwork, location):
    requests = [
        ExhibitionCreate(
            artwork_id=artwork.id,
            location_id=location.id,
            start_date=START + timedelta(days=10 * i),
            end_date=START + timedelta(days=10 * i + 5),
        )
        for i in range(6)
    ]

    results = await asyncio.gather(*(create_exhibition(sessions, r) for r in requests))

    assert len({r.id for r in results}) == 6
    assert len(await list_exhibitions(sessions)) == 6


@pytest.mark.asyncio
async def test_simultaneous_updates_same_version_one_winner(sessions, book):
    exhibition = await book(START, START + timedelta(days=7))

    results = await asyncio.gather(
        *(
            update_exhibition(
                sessions,
                exhibition.id,
                ExhibitionUpdate(notes=f"edit {i}", updated_at=exhibition.updated_at),
            )
            for i in range(5)
        ),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(r, StaleWriteError) for r in results if isinstance(r, Exception))


@pytest.mark.asyncio
async def test_cancelled_create_leaves_nothing(sessions, artwork, location):
    """A caller that gives up mid-write leaves no row and no held lock."""
    task = asyncio.create_task(create_exhibition(sessions, ExhibitionCreate(
        artwork_id=artwork.id,
        location_id=location.id,
        start_date=START,
        end_date=START + timedelta(days=7),
    )))
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # The location is still bookable for the same range
    created = await create_exhibition(sessions, ExhibitionCreate(
        artwork_id=artwork.id,
        location_id=location.id,
        start_date=START,
        end_date=START + timedelta(days=7),
    ))
    assert [e.id for e in await list_exhibitions(sessions)] == [created.id]
