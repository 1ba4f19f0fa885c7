"""
Pytest fixtures for test database, client, and seed rows.

Every test gets its own SQLite file database under tmp_path, opened with
the same engine settings as production (WAL, BEGIN IMMEDIATE), so the
conflict-checked transactions behave exactly as they do when served.
"""

from datetime import date
from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gallery.main import app
from gallery.db.init_db import create_tables
from gallery.db.session import build_engine, build_sessionmaker, get_sessions
from gallery.models import Artwork, Exhibition, Location
from gallery.schemas import ArtworkCreate, ExhibitionCreate, LocationCreate
from gallery.services.artwork_service import create_artwork
from gallery.services.exhibition_service import create_exhibition
from gallery.services.location_service import create_location


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh database file with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'gallery_test.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def sessions(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(engine)


@pytest_asyncio.fixture(scope="function")
async def client(sessions) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the session factory dependency."""

    async def override_get_sessions():
        return sessions

    app.dependency_overrides[get_sessions] = override_get_sessions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def artwork(sessions) -> Artwork:
    return await create_artwork(
        sessions, ArtworkCreate(title="Silent Forest", artist="Hanako Sato")
    )


@pytest_asyncio.fixture
async def other_artwork(sessions) -> Artwork:
    return await create_artwork(
        sessions, ArtworkCreate(title="Memory of the Sea", artist="Misaki Suzuki")
    )


@pytest_asyncio.fixture
async def location(sessions) -> Location:
    return await create_location(
        sessions, LocationCreate(width=120, height=90, description="Main hall, left side")
    )


@pytest_asyncio.fixture
async def other_location(sessions) -> Location:
    return await create_location(
        sessions, LocationCreate(width=80, height=100, description="Main hall, right side")
    )


@pytest_asyncio.fixture
async def book(sessions, artwork, location):
    """
    Factory for exhibitions. Defaults to the `artwork` and `location`
    fixtures; any field can be overridden.
    """

    async def _book(
        start: date,
        end: date,
        status: str = "scheduled",
        artwork_id: Optional[int] = None,
        location_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Exhibition:
        return await create_exhibition(
            sessions,
            ExhibitionCreate(
                artwork_id=artwork_id or artwork.id,
                location_id=location_id or location.id,
                start_date=start,
                end_date=end,
                status=status,
                notes=notes,
            ),
        )

    return _book
