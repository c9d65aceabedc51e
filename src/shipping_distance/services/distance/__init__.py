"""Distance lookup helpers."""

from .cache import RequestCache, fingerprint, request_cache
from .client import DistanceMatrixClient, check_health
from .models import DistanceQuery, DistanceResult, RouteCandidate
from .route_selector import select_route
from .units import round_up, round_up_if_configured, to_unit

__all__ = [
    "DistanceMatrixClient",
    "DistanceQuery",
    "DistanceResult",
    "RequestCache",
    "RouteCandidate",
    "check_health",
    "fingerprint",
    "request_cache",
    "round_up",
    "round_up_if_configured",
    "select_route",
    "to_unit",
]
