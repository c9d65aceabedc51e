"""Distance lookup models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal, Optional

from ...models.domain import Location, location_to_dict

TravelMode = Literal["driving", "walking", "bicycling"]
RouteRestriction = Literal["", "tolls", "highways", "ferries", "indoor"]
DistanceUnit = Literal["metric", "imperial"]
RoutePreference = Literal["shortest_distance", "longest_distance", "shortest_duration", "longest_duration"]


@dataclass(frozen=True, slots=True)
class DistanceQuery:
    origin: Optional[Location]
    destination: Optional[Location]
    travel_mode: TravelMode = "driving"
    route_restrictions: RouteRestriction = ""
    distance_unit: DistanceUnit = "metric"
    preferred_route: RoutePreference = "shortest_distance"
    round_up_distance: bool = False

    def to_dict(self) -> dict:
        return {
            "origin": location_to_dict(self.origin),
            "destination": location_to_dict(self.destination),
            "travel_mode": self.travel_mode,
            "route_restrictions": self.route_restrictions,
            "distance_unit": self.distance_unit,
            "preferred_route": self.preferred_route,
            "round_up_distance": self.round_up_distance,
        }


@dataclass(frozen=True, slots=True)
class RouteCandidate:
    """One OK element of a distance matrix response."""

    distance: Decimal
    distance_text: str
    duration: int
    duration_text: str = ""


@dataclass(slots=True)
class DistanceResult:
    distance: Decimal
    distance_text: str
    duration_seconds: int
    duration_text: str = ""
    raw_payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "distance": str(self.distance),
            "distance_text": self.distance_text,
            "duration": self.duration_seconds,
            "duration_text": self.duration_text,
            "response": self.raw_payload,
        }
