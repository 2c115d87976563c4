"""
API v1 router aggregation.

This module combines all v1 API routers into a single router
that is mounted at /api/v1.
"""

from fastapi import APIRouter

from shortsbot.api.v1.health import router as health_router
from shortsbot.api.v1.jobs import router as jobs_router
from shortsbot.api.v1.trends import router as trends_router
from shortsbot.api.v1.youtube import router as youtube_router

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)
api_router.include_router(
    trends_router,
    prefix="/shorts",
    tags=["Trends"],
)
api_router.include_router(
    youtube_router,
    prefix="/shorts/youtube",
    tags=["YouTube"],
)
api_router.include_router(
    jobs_router,
    prefix="/shorts",
    tags=["Jobs"],
)
