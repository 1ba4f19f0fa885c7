"""
Pydantic schemas for artwork request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ArtworkCreate(BaseModel):
    title: str = Field(..., max_length=255)
    artist: str = Field(..., max_length=255)
    detail_url: Optional[str] = Field(None, max_length=1000)

    model_config = {"extra": "forbid"}


class ArtworkUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    artist: Optional[str] = Field(None, max_length=255)
    detail_url: Optional[str] = Field(None, max_length=1000)
    # Version token last seen by the client; omit to skip the stale check
    updated_at: Optional[datetime] = None

    model_config = {"extra": "forbid"}


class ArtworkResponse(BaseModel):
    id: int
    title: str
    artist: str
    detail_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
