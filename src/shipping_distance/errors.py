"""Error types raised by the distance lookup and rate resolution services."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence


class ShippingError(Exception):
    """Base class for every failure the shipping services raise."""

    code = "shipping_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidLocationError(ShippingError):
    code = "invalid_location"


class TransportError(ShippingError):
    code = "transport"


class MalformedResponseError(ShippingError):
    code = "malformed_response"


class ProviderError(ShippingError):
    """The distance API answered with a top-level status other than OK."""

    code = "provider"

    def __init__(self, status: str, message: str | None = None) -> None:
        text = f"API Response Error: {status or 'UNKNOWN'}"
        if message:
            text = f"{text} - {message}"
        super().__init__(text)
        self.status = status
        self.provider_message = message


class NoRouteError(ShippingError):
    code = "no_route"

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(f"API Response Error: {message}")
        self.status = status


class NoCandidatesError(ShippingError):
    code = "no_candidates"

    def __init__(self, message: str = "No route candidates to choose from") -> None:
        super().__init__(message)


class FieldValidationError(ShippingError):
    code = "field_validation"

    def __init__(self, field: str, title: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.title = title


class DuplicateRuleError(ShippingError):
    code = "duplicate_rule"

    def __init__(self, row: int, rules: Mapping[str, str]) -> None:
        details = ", ".join(f"{title}: {value}" for title, value in rules.items())
        super().__init__(
            "Each shipping rules combination for each row must be unique. "
            f"Please fix duplicate shipping rules for rate row {row}: {details}"
        )
        self.row = row
        self.rules = dict(rules)


class EmptyTableError(ShippingError):
    code = "empty_table"

    def __init__(self, message: str = "Shipping rates table is empty") -> None:
        super().__init__(message)


class NoMatchError(ShippingError):
    code = "no_match"

    def __init__(self, distance: Decimal, unit: str) -> None:
        super().__init__(f"No shipping rates defined within distance range: {distance} {unit}")
        self.distance = distance
        self.unit = unit


class FeatureGatedError(ShippingError):
    code = "feature_gated"


class FormulaError(ShippingError):
    code = "formula"


@dataclass(frozen=True, slots=True)
class RowError:
    """One problem found in a submitted rate table row."""

    row: int
    message: str
    field: str | None = None

    def __str__(self) -> str:
        return self.message


class RateTableError(ShippingError):
    """Every row problem found in a single validation pass."""

    code = "rate_table"

    def __init__(self, errors: Sequence[RowError]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(str(error) for error in self.errors))
