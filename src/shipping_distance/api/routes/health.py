"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...services.distance.client import check_health

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/distance-api", status_code=status.HTTP_200_OK)
def health_distance_api() -> dict:
    """Probe the Distance Matrix API with the configured key."""
    return {"service": "distance-matrix", "healthy": check_health()}
