"""Distance unit conversion helpers."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal

from .models import DistanceUnit

METERS_TO_KILOMETERS = Decimal("0.001")
METERS_TO_MILES = Decimal("0.000621371")
ONE_DECIMAL = Decimal("0.1")

_NUMERIC_CHARS = re.compile(r"[0-9.,]")


def to_unit(meters: int | float | Decimal, unit: DistanceUnit = "metric") -> Decimal:
    """Convert raw meters to kilometers or miles, rounded half away from zero to one decimal."""
    value = Decimal(str(meters))
    if value < 0:
        raise ValueError(f"Distance cannot be negative: {meters}")
    factor = METERS_TO_MILES if unit == "imperial" else METERS_TO_KILOMETERS
    return (value * factor).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def unit_label(unit: DistanceUnit) -> str:
    return "mi" if unit == "imperial" else "km"


def round_up(distance: Decimal, distance_text: str = "") -> tuple[Decimal, str]:
    """Ceil the distance and rewrite the display text, keeping its unit suffix.

    ``round_up(Decimal("12.3"), "12.3 km")`` gives ``(Decimal("13"), "13 km")``.
    """
    rounded = Decimal(math.ceil(distance))
    suffix = _NUMERIC_CHARS.sub("", distance_text)
    return rounded, f"{rounded}{suffix}"


def round_up_if_configured(distance: Decimal, distance_text: str, enabled: bool) -> tuple[Decimal, str]:
    if not enabled:
        return distance, distance_text
    return round_up(distance, distance_text)
