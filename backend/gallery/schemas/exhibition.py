"""
Pydantic schemas for exhibition request/response validation.

Status and date ordering are checked by the booking engine rather than
here, so direct callers of the services get the same ValidationError as
HTTP clients.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from gallery.schemas.artwork import ArtworkResponse
from gallery.schemas.location import LocationResponse


class ExhibitionCreate(BaseModel):
    artwork_id: int
    location_id: int
    start_date: date
    end_date: date
    status: str = "scheduled"
    notes: Optional[str] = Field(None, max_length=5000)

    model_config = {"extra": "forbid"}


class ExhibitionUpdate(BaseModel):
    """Partial update: omitted fields keep their stored values."""

    artwork_id: Optional[int] = None
    location_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=5000)
    updated_at: Optional[datetime] = None

    model_config = {"extra": "forbid"}


class ExhibitionResponse(BaseModel):
    id: int
    # None once the artwork or location of a completed exhibition is deleted
    artwork_id: Optional[int]
    location_id: Optional[int]
    start_date: date
    end_date: date
    status: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExhibitionDetail(ExhibitionResponse):
    """Exhibition with its artwork and location joined in."""

    artwork: Optional[ArtworkResponse] = None
    location: Optional[LocationResponse] = None
