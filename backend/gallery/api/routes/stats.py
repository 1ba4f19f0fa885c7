"""
Statistics endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.db.session import get_sessions
from gallery.schemas.stats import StatsSummary
from gallery.services.stats_service import summary

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("/summary", response_model=StatsSummary)
async def stats_summary(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessions),
):
    return await summary(sessions)
