"""Shipping method calculation."""

from .models import CalculationHooks, DistanceLookup, MethodSettings, ShippingRate
from .service import ShippingCalculator, calculate_shipping, validate_api_key

__all__ = [
    "CalculationHooks",
    "DistanceLookup",
    "MethodSettings",
    "ShippingCalculator",
    "ShippingRate",
    "calculate_shipping",
    "validate_api_key",
]
