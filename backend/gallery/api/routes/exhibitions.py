"""
Exhibition endpoints backed by the conflict-checked booking engine.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.db.session import get_sessions
from gallery.schemas.common import MessageResponse
from gallery.schemas.exhibition import ExhibitionCreate, ExhibitionDetail, ExhibitionUpdate
from gallery.services.exhibition_service import (
    create_exhibition,
    delete_exhibition,
    get_exhibition,
    list_exhibitions,
    update_exhibition,
)

router = APIRouter(prefix="/exhibitions", tags=["Exhibitions"])


@router.get("/", response_model=list[ExhibitionDetail])
async def list_exhibitions_endpoint(
    status_filter: Optional[str] = Query(None, alias="status"),
    current: bool = Query(False),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """
    List exhibitions, newest start date first.
    `current=true` keeps only those running today, ordered by location.
    """
    return await list_exhibitions(sessions, status=status_filter, current=current)


@router.get("/current", response_model=list[ExhibitionDetail])
async def list_current_exhibitions(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """Exhibitions whose date range contains today, by location."""
    return await list_exhibitions(sessions, current=True)


@router.get("/{exhibition_id}", response_model=ExhibitionDetail)
async def get_exhibition_endpoint(
    exhibition_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await get_exhibition(sessions, exhibition_id)


@router.post("/", response_model=ExhibitionDetail, status_code=status.HTTP_201_CREATED)
async def create_exhibition_endpoint(
    exhibition_data: ExhibitionCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """
    Book an artwork into a location.

    Returns 409 if a scheduled or active exhibition at the location shares
    any day with the requested range (both ends inclusive).
    """
    return await create_exhibition(sessions, exhibition_data)


@router.put("/{exhibition_id}", response_model=ExhibitionDetail)
async def update_exhibition_endpoint(
    exhibition_id: int,
    exhibition_data: ExhibitionUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """
    Update an exhibition.

    Send the `updated_at` you last read; if someone saved in between the
    response is 409 and the exhibition must be re-fetched.
    """
    return await update_exhibition(sessions, exhibition_id, exhibition_data)


@router.delete("/{exhibition_id}", response_model=MessageResponse)
async def delete_exhibition_endpoint(
    exhibition_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    await delete_exhibition(sessions, exhibition_id)
    return MessageResponse(message="Exhibition deleted")
