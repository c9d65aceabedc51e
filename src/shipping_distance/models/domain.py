"""Domain models for locations and order packages."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair."""

    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True, slots=True)
class Address:
    """Structured mailing address of a shipping destination."""

    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""

    def parts(self) -> list[str]:
        values = [self.address_1, self.address_2, self.city, self.state, self.postcode, self.country]
        return [value.strip() for value in values if value and value.strip()]

    def as_param(self) -> str:
        return ",".join(self.parts())

    def is_empty(self) -> bool:
        return not self.parts()


Location = Union[Coordinate, Address, str]


def location_param(location: Optional[Location]) -> str:
    """Render a location the way the distance API expects it in origins/destinations."""
    if location is None:
        return ""
    if isinstance(location, str):
        return location.strip()
    return location.as_param()


def location_to_dict(location: Optional[Location]) -> dict | str | None:
    if location is None or isinstance(location, str):
        return location
    if isinstance(location, Coordinate):
        return {"lat": location.lat, "lng": location.lng}
    return {
        "address_1": location.address_1,
        "address_2": location.address_2,
        "city": location.city,
        "state": location.state,
        "postcode": location.postcode,
        "country": location.country,
    }


@dataclass(frozen=True, slots=True)
class LineItem:
    """A cart line: one product, its shipping class and quantity."""

    product_id: str
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    shipping_class_id: int = 0


@dataclass(frozen=True, slots=True)
class Package:
    """Cart contents and destination handed over by the order collaborator."""

    contents: tuple[LineItem, ...] = ()
    destination: Optional[Address] = None
    destination_coordinate: Optional[Coordinate] = None

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.contents)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.unit_price * item.quantity for item in self.contents), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "contents": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "shipping_class_id": item.shipping_class_id,
                }
                for item in self.contents
            ],
            "destination": location_to_dict(self.destination),
            "destination_coordinate": location_to_dict(self.destination_coordinate),
        }
