"""
Artwork endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.db.session import get_sessions
from gallery.schemas.artwork import ArtworkCreate, ArtworkResponse, ArtworkUpdate
from gallery.schemas.common import MessageResponse
from gallery.services.artwork_service import (
    create_artwork,
    delete_artwork,
    get_artwork,
    list_artworks,
    update_artwork,
)

router = APIRouter(prefix="/artworks", tags=["Artworks"])


@router.get("/", response_model=list[ArtworkResponse])
async def list_artworks_endpoint(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await list_artworks(sessions)


@router.get("/{artwork_id}", response_model=ArtworkResponse)
async def get_artwork_endpoint(
    artwork_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await get_artwork(sessions, artwork_id)


@router.post("/", response_model=ArtworkResponse, status_code=status.HTTP_201_CREATED)
async def create_artwork_endpoint(
    artwork_data: ArtworkCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await create_artwork(sessions, artwork_data)


@router.put("/{artwork_id}", response_model=ArtworkResponse)
async def update_artwork_endpoint(
    artwork_id: int,
    artwork_data: ArtworkUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await update_artwork(sessions, artwork_id, artwork_data)


@router.delete("/{artwork_id}", response_model=MessageResponse)
async def delete_artwork_endpoint(
    artwork_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """Refused with 409 while a scheduled or active exhibition uses the artwork."""
    await delete_artwork(sessions, artwork_id)
    return MessageResponse(message="Artwork deleted")
