"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the booking core
"""
from fastapi import APIRouter

from homestay import __version__
from homestay.api.v1 import bookings, pricing
from homestay.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(bookings.router)
router.include_router(pricing.router)


@router.get("/health", tags=["System Health"])
def api_health_check():
    return {
        "success": True,
        "message": "healthy",
        "data": {"version": __version__, "api_version": "v1"},
        "error": None,
    }
