"""Shipping method models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, Literal, Optional

from ...config import settings
from ...errors import ShippingError
from ...models.domain import Coordinate, Location, Package, location_to_dict
from ..distance.models import (
    DistanceQuery,
    DistanceResult,
    DistanceUnit,
    RoutePreference,
    RouteRestriction,
    TravelMode,
)
from ..rates.models import CostBreakdown, RateRule, RateTable


@dataclass(frozen=True, slots=True)
class MethodSettings:
    """Configuration of one shipping method instance, passed into every calculation."""

    instance_id: int = 0
    shipping_label: str = settings.method_title
    tax_status: Literal["taxable", "none"] = "taxable"
    api_key: str = ""
    origin: Optional[Coordinate] = None
    travel_mode: TravelMode = "driving"
    route_restrictions: RouteRestriction = ""
    distance_unit: DistanceUnit = "metric"
    preferred_route: RoutePreference = "shortest_distance"
    round_up_distance: bool = False
    show_distance: bool = False
    enable_address_picker: bool = False
    table_rates: RateTable = field(default_factory=RateTable)

    @property
    def rate_id(self) -> str:
        return f"{settings.method_id}:{self.instance_id}"

    def query(self, origin: Optional[Location], destination: Optional[Location]) -> DistanceQuery:
        return DistanceQuery(
            origin=origin,
            destination=destination,
            travel_mode=self.travel_mode,
            route_restrictions=self.route_restrictions,
            distance_unit=self.distance_unit,
            preferred_route=self.preferred_route,
            round_up_distance=self.round_up_distance,
        )

    def cache_dict(self) -> dict:
        """Every setting that can change a lookup or its pricing, for cache fingerprints."""
        return {
            "instance_id": self.instance_id,
            "shipping_label": self.shipping_label,
            "tax_status": self.tax_status,
            "api_key": self.api_key,
            "origin": location_to_dict(self.origin),
            "travel_mode": self.travel_mode,
            "route_restrictions": self.route_restrictions,
            "distance_unit": self.distance_unit,
            "preferred_route": self.preferred_route,
            "round_up_distance": self.round_up_distance,
            "show_distance": self.show_distance,
            "enable_address_picker": self.enable_address_picker,
            "table_rates": [rule.to_dict() for rule in self.table_rates],
        }


@dataclass(slots=True)
class DistanceLookup:
    """Outcome of a distance request: either a result or the error that prevented it."""

    result: Optional[DistanceResult] = None
    error: Optional[ShippingError] = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


@dataclass(slots=True)
class ShippingRate:
    id: str
    label: str
    cost: Decimal
    taxable: bool = True
    meta_data: dict = field(default_factory=dict)
    breakdown: Optional[CostBreakdown] = None


@dataclass(frozen=True, slots=True)
class CalculationHooks:
    """Optional extension points applied during a calculation."""

    origin: Optional[Callable[[Optional[Location], Package], Optional[Location]]] = None
    destination: Optional[Callable[[Optional[Location], Package], Optional[Location]]] = None
    rule_pre: Optional[Callable[[Decimal, RateTable], Optional[RateRule]]] = None
    rule_post: Optional[Callable[[RateRule, Decimal, RateTable], RateRule]] = None
    cost_override: Optional[Callable[[RateRule, Decimal], Optional[Decimal]]] = None
    extra_rates: Optional[Callable[[ShippingRate], Iterable[ShippingRate]]] = None
