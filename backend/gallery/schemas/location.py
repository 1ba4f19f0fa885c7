"""
Pydantic schemas for location request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class LocationCreate(BaseModel):
    id: Optional[int] = Field(None, gt=0)
    width: int
    height: int
    description: Optional[str] = Field(None, max_length=1000)

    model_config = {"extra": "forbid"}


class LocationUpdate(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    description: Optional[str] = Field(None, max_length=1000)
    updated_at: Optional[datetime] = None

    model_config = {"extra": "forbid"}


class LocationResponse(BaseModel):
    id: int
    width: int
    height: int
    description: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    location_id: int
    available: bool
    conflict_count: int
