"""
PitchMixer API

All routes live under /api.
"""

from fastapi import APIRouter

from .mix import router as mix_router
from .capabilities import router as capabilities_router

# Main API router
api_router = APIRouter(prefix="/api")

# Health check endpoint
@api_router.get("/health")
async def health_check():
    """Health check endpoint for frontend connectivity."""
    return {"status": "ok", "service": "pitchmixer"}

api_router.include_router(mix_router)
api_router.include_router(capabilities_router)

__all__ = ['api_router']
