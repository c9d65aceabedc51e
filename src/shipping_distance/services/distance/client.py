"""HTTP client for the Distance Matrix API."""

from __future__ import annotations

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

import httpx

from ...config import settings
from ...errors import (
    InvalidLocationError,
    MalformedResponseError,
    NoRouteError,
    ProviderError,
    ShippingError,
    TransportError,
)
from ...models.domain import Coordinate, location_param
from ..diagnostics import DiagnosticsSink
from .models import DistanceQuery, DistanceResult, RouteCandidate
from .route_selector import select_route
from .units import round_up_if_configured, to_unit

MASKED_KEY = "**********"

# Element statuses with a known explanation, checked in this order of appearance.
NO_ROUTE_MESSAGES = {
    "NOT_FOUND": "Origin and/or destination of this pairing could not be geocoded",
    "ZERO_RESULTS": "No route could be found between the origin and destination",
    "MAX_ROUTE_LENGTH_EXCEEDED": "Requested route is too long and cannot be processed",
}

logger = logging.getLogger(__name__)


def check_status(payload: dict) -> None:
    status = payload.get("status") or ""
    if status != "OK":
        raise ProviderError(status, payload.get("error_message"))


def collect_elements(payload: dict) -> tuple[list[dict[str, Any]], list[str]]:
    """Split response elements into usable routes (raw meters) and error statuses."""
    routes: list[dict[str, Any]] = []
    errors: list[str] = []
    rows = payload.get("rows") or []
    if not isinstance(rows, list):
        raise MalformedResponseError("API response rows are malformed")
    for row in rows:
        if not isinstance(row, dict) or not isinstance(row.get("elements") or [], list):
            raise MalformedResponseError("API response elements are malformed")
        for element in row.get("elements") or []:
            if not isinstance(element, dict):
                raise MalformedResponseError("API response element is malformed")
            status = element.get("status") or ""
            if status != "OK":
                errors.append(status)
                continue
            try:
                meters = Decimal(str(element["distance"]["value"]))
                if not meters.is_finite() or meters < 0:
                    raise ValueError(f"invalid distance value {element['distance']['value']!r}")
                routes.append(
                    {
                        "distance": meters,
                        "distance_text": element["distance"].get("text", ""),
                        "duration": int(element["duration"]["value"]),
                        "duration_text": element["duration"].get("text", ""),
                    }
                )
            except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as exc:
                raise MalformedResponseError(f"API response element is incomplete: {exc}") from exc
    return routes, errors


def no_route_error(errors: Sequence[str]) -> NoRouteError:
    for status in errors:
        if status in NO_ROUTE_MESSAGES:
            return NoRouteError(NO_ROUTE_MESSAGES[status], status=status)
    return NoRouteError("No results found")


class DistanceMatrixClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        connect_timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        language: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else (settings.distance_api_key or "")
        self.base_url = base_url or settings.distance_api_url
        if not self.base_url:
            raise ValueError("Distance API URL is not configured.")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.connect_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.backoff_seconds
        self.language = language or settings.language
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.connect_timeout, self.timeout)),
            transport=self.transport,
        )

    def build_params(self, query: DistanceQuery) -> dict[str, str]:
        params = {
            "key": self.api_key,
            "mode": query.travel_mode,
            "units": query.distance_unit,
            "language": self.language,
            "origins": location_param(query.origin),
            "destinations": location_param(query.destination),
        }
        if query.route_restrictions:
            params["avoid"] = query.route_restrictions
        return params

    def masked_url(self, params: dict[str, str]) -> str:
        safe = dict(params)
        if safe.get("key"):
            safe["key"] = MASKED_KEY
        return str(httpx.URL(self.base_url, params=safe))

    def request(self, params: dict[str, str], diagnostics: DiagnosticsSink | None = None) -> dict:
        """Issue the GET request and return the decoded JSON payload."""
        url = self.masked_url(params)
        logger.info("Distance API request: %s", url)
        if diagnostics is not None:
            diagnostics.add(f"API Request URL: {url}")

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.base_url, params=params)
                    response.raise_for_status()
                    break
                except httpx.HTTPStatusError as exc:
                    attempt += 1
                    if exc.response.status_code < 500 or attempt > self.max_retries:
                        raise TransportError(
                            f"Distance API responded with HTTP {exc.response.status_code}"
                        ) from exc
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning("Distance API request timed out after %s attempt(s): %s", attempt, exc)
                        raise TransportError(f"Distance API request timed out: {exc}") from exc
                    logger.debug("Distance API timeout, retrying (attempt %s/%s)", attempt, self.max_retries)
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TransportError, OSError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise TransportError(f"Failed to connect to distance API: {exc}") from exc
                    logger.debug("Distance API network error, retrying (attempt %s/%s): %s", attempt, self.max_retries, exc)
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.HTTPError as exc:
                    raise TransportError(f"Distance API request failed: {exc}") from exc
        finally:
            client.close()

        if not response.content.strip():
            raise MalformedResponseError("API response is empty")
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Error occured while decoding API response: {exc}") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("Error occured while decoding API response: expected a JSON object")
        return payload

    def fetch(self, query: DistanceQuery, diagnostics: DiagnosticsSink | None = None) -> DistanceResult:
        """Resolve one distance for ``query``.

        Raises a ``ShippingError`` subclass for every failure: invalid
        locations, transport problems, undecodable bodies, provider errors and
        responses without a usable route.
        """
        if not location_param(query.origin):
            raise InvalidLocationError("Origin parameter is invalid")
        if not location_param(query.destination):
            raise InvalidLocationError("Destination parameter is invalid")

        payload = self.request(self.build_params(query), diagnostics)
        check_status(payload)

        routes, errors = collect_elements(payload)
        if not routes:
            raise no_route_error(errors)

        candidates = [
            RouteCandidate(
                distance=to_unit(route["distance"], query.distance_unit),
                distance_text=route["distance_text"],
                duration=route["duration"],
                duration_text=route["duration_text"],
            )
            for route in routes
        ]
        chosen = select_route(candidates, query.preferred_route)
        distance, distance_text = round_up_if_configured(
            chosen.distance, chosen.distance_text, query.round_up_distance
        )
        return DistanceResult(
            distance=distance,
            distance_text=distance_text,
            duration_seconds=chosen.duration,
            duration_text=chosen.duration_text,
            raw_payload=payload,
        )


def check_health(api_key: str | None = None) -> bool:
    """Probe the API with a single known pair of coordinates."""
    key = api_key or settings.distance_api_key
    if not key:
        return False
    query = DistanceQuery(
        origin=Coordinate(settings.default_origin_lat, settings.default_origin_lng),
        destination=Coordinate(settings.probe_destination_lat, settings.probe_destination_lng),
    )
    try:
        DistanceMatrixClient(api_key=key).fetch(query)
        return True
    except ShippingError as exc:
        logger.warning("Distance API health check failed: %s", exc)
        return False
