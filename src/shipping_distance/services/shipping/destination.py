"""Shipping destination checks and formatting."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Optional

from ...models.domain import Address, Location, Package
from ..diagnostics import DiagnosticsSink

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "address_1": "Street address",
    "city": "Town / City",
    "state": "State / County",
    "postcode": "Postcode / ZIP",
    "country": "Country / Region",
}

STATE_REQUIRED_COUNTRIES = {"US", "CA", "AU"}

POSTCODE_PATTERNS = {
    "US": re.compile(r"^\d{5}(-\d{4})?$"),
    "CA": re.compile(r"^[ABCEGHJ-NPRSTVXY]\d[ABCEGHJ-NPRSTV-Z] ?\d[ABCEGHJ-NPRSTV-Z]\d$"),
    "GB": re.compile(r"^[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}$"),
    "AU": re.compile(r"^\d{4}$"),
    "DE": re.compile(r"^\d{5}$"),
    "ID": re.compile(r"^\d{5}$"),
}


def is_postcode(postcode: str, country: str) -> bool:
    """Countries without a known pattern accept any postcode."""
    pattern = POSTCODE_PATTERNS.get(country.upper())
    if pattern is None:
        return True
    return bool(pattern.match(postcode.strip().upper()))


def required_fields(country: str, calculator_mode: bool = False) -> list[str]:
    fields = ["city", "postcode", "country"]
    if not calculator_mode:
        fields.insert(0, "address_1")
    if country.upper() in STATE_REQUIRED_COUNTRIES:
        fields.append("state")
    return fields


def address_errors(address: Address, calculator_mode: bool = False) -> list[str]:
    errors: list[str] = []
    for key in required_fields(address.country, calculator_mode):
        if not getattr(address, key).strip():
            errors.append(f"Shipping destination field is empty: {FIELD_LABELS[key]}")
    if address.country and address.postcode and not is_postcode(address.postcode, address.country):
        errors.append(f"Shipping destination field is invalid: {FIELD_LABELS['postcode']}")
    return errors


def resolve_destination(
    package: Package,
    *,
    use_coordinate: bool = False,
    calculator_mode: bool = False,
    diagnostics: DiagnosticsSink | None = None,
) -> Optional[Location]:
    """Pick the location to send as ``destinations``.

    An invalid address resolves to ``None`` after its problems are reported,
    which later fails the lookup as an invalid location.
    """
    if use_coordinate and package.destination_coordinate is not None:
        return package.destination_coordinate

    address = package.destination
    if address is None:
        return None

    errors = address_errors(address, calculator_mode)
    if errors:
        for error in errors:
            logger.info(error)
            if diagnostics is not None:
                diagnostics.error(error)
        return None

    if calculator_mode:
        address = replace(address, address_1="", address_2="")
    return address
