"""
Location endpoints, including availability and schedule lookups.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.db.session import get_sessions
from gallery.schemas.common import MessageResponse
from gallery.schemas.exhibition import ExhibitionDetail
from gallery.schemas.location import (
    AvailabilityResponse,
    LocationCreate,
    LocationResponse,
    LocationUpdate,
)
from gallery.services.exhibition_service import check_availability, location_schedule
from gallery.services.location_service import (
    create_location,
    delete_location,
    get_location,
    list_locations,
    update_location,
)

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("/", response_model=list[LocationResponse])
async def list_locations_endpoint(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await list_locations(sessions)


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location_endpoint(
    location_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await get_location(sessions, location_id)


@router.post("/", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location_endpoint(
    location_data: LocationCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await create_location(sessions, location_data)


@router.put("/{location_id}", response_model=LocationResponse)
async def update_location_endpoint(
    location_id: int,
    location_data: LocationUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await update_location(sessions, location_id, location_data)


@router.delete("/{location_id}", response_model=MessageResponse)
async def delete_location_endpoint(
    location_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """Refused with 409 while a scheduled or active exhibition occupies the location."""
    await delete_location(sessions, location_id)
    return MessageResponse(message="Location deleted")


@router.get("/{location_id}/availability", response_model=AvailabilityResponse)
async def location_availability(
    location_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    exclude_exhibition_id: Optional[int] = Query(None),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    """
    Check whether a booking for this range would pass the overlap check.
    Pass `exclude_exhibition_id` when editing an existing exhibition.
    """
    return await check_availability(
        sessions, location_id, start_date, end_date, exclude_id=exclude_exhibition_id
    )


@router.get("/{location_id}/schedule", response_model=list[ExhibitionDetail])
async def location_schedule_endpoint(
    location_id: int,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await location_schedule(sessions, location_id, year=year, month=month)
