"""API endpoints."""

from fastapi import APIRouter

from app.api import analytics, routes
from app.api.deps import client_ip

router = APIRouter()
router.include_router(routes.router)
router.include_router(analytics.router)

__all__ = [
    "router",
    "client_ip",
]
