"""Shipping rate calculation orchestration."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Callable, Optional

from ...config import settings
from ...errors import FieldValidationError, ShippingError
from ...models.domain import Address, Coordinate, LineItem, Location, Package, location_to_dict
from ...schemas.rates import (
    MethodSettingsModel,
    PackageModel,
    RateCalculationRequest,
    RateCalculationResponse,
    RateRuleModel,
    ShippingRateModel,
    TableValidationRequest,
    TableValidationResponse,
)
from ..diagnostics import DiagnosticsSink
from ..distance.cache import RequestCache, fingerprint, request_cache
from ..distance.client import DistanceMatrixClient
from ..distance.models import DistanceQuery
from ..rates.models import RateRule, RateTable
from ..rates.resolver import compute_cost, find_rule
from ..rates.validator import validate_table_rates
from .destination import resolve_destination
from .models import CalculationHooks, DistanceLookup, MethodSettings, ShippingRate

logger = logging.getLogger(__name__)


class ShippingCalculator:
    """Computes the rate one shipping method offers for a package.

    Failures never propagate out of :meth:`calculate`; the method simply
    offers no rate and the reason is reported to the diagnostics sink.
    """

    def __init__(
        self,
        method: MethodSettings,
        *,
        client: DistanceMatrixClient | None = None,
        cache: RequestCache | None = None,
        hooks: CalculationHooks | None = None,
        debug: bool | None = None,
        pro_enabled: bool | None = None,
        on_debug: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.method = method
        self.client = client or DistanceMatrixClient(api_key=method.api_key or None)
        self.cache = cache if cache is not None else request_cache
        self.hooks = hooks or CalculationHooks()
        self.debug = settings.debug_mode if debug is None else debug
        self.pro_enabled = settings.pro_enabled if pro_enabled is None else pro_enabled
        self.on_debug = on_debug

    def new_diagnostics(self) -> DiagnosticsSink:
        return DiagnosticsSink(enabled=self.debug, callback=self.on_debug)

    def is_available(self, package: Package) -> bool:
        has_destination = package.destination is not None and not package.destination.is_empty()
        return bool(package.contents) and (has_destination or package.destination_coordinate is not None)

    def origin_for(self, package: Package) -> Optional[Location]:
        origin: Optional[Location] = self.method.origin
        if self.hooks.origin is not None:
            origin = self.hooks.origin(origin, package)
        return origin

    def destination_for(
        self,
        package: Package,
        diagnostics: DiagnosticsSink,
        calculator_mode: bool = False,
    ) -> Optional[Location]:
        destination = resolve_destination(
            package,
            use_coordinate=self.method.enable_address_picker and self.pro_enabled,
            calculator_mode=calculator_mode,
            diagnostics=diagnostics,
        )
        if self.hooks.destination is not None:
            destination = self.hooks.destination(destination, package)
        return destination

    def lookup_distance(
        self,
        origin: Optional[Location],
        destination: Optional[Location],
        package: Package | None = None,
        *,
        use_cache: bool = True,
        diagnostics: DiagnosticsSink | None = None,
    ) -> DistanceLookup:
        """Resolve the distance, consulting the cache unless debugging."""
        diagnostics = diagnostics or self.new_diagnostics()
        try:
            query = self.method.query(origin, destination)
            key = None
            if use_cache and not self.debug:
                key = fingerprint(
                    location_to_dict(origin),
                    location_to_dict(destination),
                    package.to_dict() if package is not None else {},
                    self.method.cache_dict(),
                )
                cached = self.cache.get(key)
                if cached is not None:
                    diagnostics.add(f"Cache key: {key}")
                    diagnostics.add(f"Cached data: {json.dumps(cached.to_dict(), default=str)}")
                    return DistanceLookup(result=cached, cached=True)

            result = self.client.fetch(query, diagnostics)
            diagnostics.add(f"API Response: {json.dumps(result.to_dict(), default=str)}")
            if key is not None:
                self.cache.put(key, result)
            return DistanceLookup(result=result)
        except ShippingError as exc:
            logger.warning("Distance lookup failed (%s): %s", exc.code, exc.message)
            diagnostics.error(exc.message)
            return DistanceLookup(error=exc)

    def match_rule(self, distance: Decimal) -> RateRule:
        table = self.method.table_rates
        if self.hooks.rule_pre is not None:
            rule = self.hooks.rule_pre(distance, table)
            if rule is not None:
                return rule
        rule = find_rule(distance, table, self.method.distance_unit)
        if self.hooks.rule_post is not None:
            rule = self.hooks.rule_post(rule, distance, table)
        return rule

    def calculate(
        self,
        package: Package,
        *,
        calculator_mode: bool = False,
        diagnostics: DiagnosticsSink | None = None,
    ) -> list[ShippingRate]:
        diagnostics = diagnostics or self.new_diagnostics()
        if not self.is_available(package):
            return []
        try:
            origin = self.origin_for(package)
            destination = self.destination_for(package, diagnostics, calculator_mode)

            lookup = self.lookup_distance(origin, destination, package, diagnostics=diagnostics)
            if lookup.error is not None:
                raise lookup.error

            result = lookup.result
            rule = self.match_rule(result.distance)
            breakdown = compute_cost(
                rule,
                package,
                result.distance,
                default_label=self.method.shipping_label,
                distance_text=result.distance_text if self.method.show_distance else None,
                pro_enabled=self.pro_enabled,
            )

            cost = breakdown.total
            if self.hooks.cost_override is not None:
                override = self.hooks.cost_override(rule, result.distance)
                if override is not None:
                    cost = Decimal(str(override))

            rate = ShippingRate(
                id=self.method.rate_id,
                label=breakdown.label,
                cost=cost,
                taxable=self.method.tax_status == "taxable",
                meta_data=result.to_dict(),
                breakdown=breakdown,
            )
            return self.register_rate(rate)
        except ShippingError as exc:
            logger.info("Shipping method %s offers no rate: %s", self.method.rate_id, exc.message)
            diagnostics.error(exc.message)
            return []

    def register_rate(self, rate: ShippingRate) -> list[ShippingRate]:
        rates = [rate]
        if self.hooks.extra_rates is not None:
            rates.extend(self.hooks.extra_rates(rate))
        return rates


def calculate_shipping(method: MethodSettings, package: Package, **kwargs) -> list[ShippingRate]:
    return ShippingCalculator(method, **kwargs).calculate(package)


def validate_api_key(api_key: str, *, client: DistanceMatrixClient | None = None) -> None:
    """Issue an uncached probe request with ``api_key``; raise whatever error it produced."""
    if not api_key:
        return
    query = DistanceQuery(
        origin=Coordinate(settings.default_origin_lat, settings.default_origin_lng),
        destination=Coordinate(settings.probe_destination_lat, settings.probe_destination_lng),
    )
    (client or DistanceMatrixClient(api_key=api_key)).fetch(query)


def build_package(payload: PackageModel) -> Package:
    return Package(
        contents=tuple(
            LineItem(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                shipping_class_id=item.shipping_class_id,
            )
            for item in payload.contents
        ),
        destination=Address(**payload.destination.model_dump()) if payload.destination else None,
        destination_coordinate=(
            Coordinate(payload.destination_coordinate.lat, payload.destination_coordinate.lng)
            if payload.destination_coordinate
            else None
        ),
    )


def build_method_settings(payload: MethodSettingsModel, *, pro_enabled: bool | None = None) -> MethodSettings:
    """Validate raw method settings, including the rate table, into a ``MethodSettings``."""
    pro = settings.pro_enabled if pro_enabled is None else pro_enabled
    if payload.enable_address_picker and not pro:
        raise FieldValidationError(
            "enable_address_picker",
            "Enable Address Picker",
            "Enable Address Picker field value only changeable in pro version. Please upgrade!",
        )
    table = validate_table_rates(payload.table_rates, payload.shipping_classes, pro_enabled=pro)
    return MethodSettings(
        instance_id=payload.instance_id,
        shipping_label=payload.shipping_label or settings.method_title,
        tax_status=payload.tax_status,
        api_key=payload.api_key or "",
        origin=Coordinate(payload.origin.lat, payload.origin.lng) if payload.origin else None,
        travel_mode=payload.travel_mode,
        route_restrictions=payload.route_restrictions,
        distance_unit=payload.distance_unit,
        preferred_route=payload.preferred_route,
        round_up_distance=payload.round_up_distance,
        show_distance=payload.show_distance,
        enable_address_picker=payload.enable_address_picker,
        table_rates=table,
    )


def rule_to_model(rule: RateRule) -> RateRuleModel:
    return RateRuleModel(
        max_distance=float(rule.max_distance),
        min_order_quantity=float(rule.min_order_quantity),
        max_order_quantity=float(rule.max_order_quantity),
        min_order_amount=float(rule.min_order_amount),
        max_order_amount=float(rule.max_order_amount),
        rate_type=rule.rate_type,
        class_rates={class_id: float(rate) for class_id, rate in rule.class_rates.items()},
        surcharge=float(rule.surcharge),
        total_cost_type=rule.total_cost_type,
        total_cost_formula=rule.total_cost_formula,
        shipping_label=rule.shipping_label,
    )


def validate_rate_table(payload: TableValidationRequest) -> TableValidationResponse:
    table: RateTable = validate_table_rates(payload.rows, payload.shipping_classes)
    return TableValidationResponse(rules=[rule_to_model(rule) for rule in table])


def calculate_rates(
    payload: RateCalculationRequest,
    *,
    client: DistanceMatrixClient | None = None,
    cache: RequestCache | None = None,
) -> RateCalculationResponse:
    method = build_method_settings(payload.method)
    package = build_package(payload.package)
    calculator = ShippingCalculator(method, client=client, cache=cache, debug=payload.debug)
    diagnostics = calculator.new_diagnostics()
    rates = calculator.calculate(package, calculator_mode=payload.calculator_mode, diagnostics=diagnostics)
    return RateCalculationResponse(
        rates=[
            ShippingRateModel(
                id=rate.id,
                label=rate.label,
                cost=float(rate.cost),
                taxable=rate.taxable,
                meta_data=rate.meta_data,
                breakdown=rate.breakdown.to_dict() if rate.breakdown else None,
            )
            for rate in rates
        ],
        diagnostics=diagnostics.messages,
    )
