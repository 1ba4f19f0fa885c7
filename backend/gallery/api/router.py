"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from gallery.api.routes import artworks, exhibitions, locations, stats

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(artworks.router)
api_router.include_router(locations.router)
api_router.include_router(exhibitions.router)
api_router.include_router(stats.router)
