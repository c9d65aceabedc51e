"""Rate calculation and rate table request/response schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AddressModel(BaseModel):
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = Field(default="", description="ISO 3166-1 alpha-2 country code.")


class LineItemModel(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    shipping_class_id: int = Field(default=0, ge=0)


class PackageModel(BaseModel):
    contents: List[LineItemModel] = Field(default_factory=list)
    destination: Optional[AddressModel] = None
    destination_coordinate: Optional[CoordinateModel] = Field(
        default=None,
        description="Picked destination coordinate, used when the address picker is enabled.",
    )


class MethodSettingsModel(BaseModel):
    instance_id: int = Field(default=0, ge=0)
    shipping_label: Optional[str] = Field(default=None, description="Label shown at checkout.")
    tax_status: Literal["taxable", "none"] = "taxable"
    api_key: Optional[str] = Field(default=None, description="Distance Matrix API key.")
    origin: Optional[CoordinateModel] = Field(default=None, description="Store location.")
    travel_mode: Literal["driving", "walking", "bicycling"] = "driving"
    route_restrictions: Literal["", "tolls", "highways", "ferries", "indoor"] = ""
    distance_unit: Literal["metric", "imperial"] = "metric"
    preferred_route: Literal["shortest_distance", "longest_distance", "shortest_duration", "longest_duration"] = (
        "shortest_distance"
    )
    round_up_distance: bool = False
    show_distance: bool = False
    enable_address_picker: bool = False
    table_rates: List[Dict[str, Any]] = Field(default_factory=list, description="Raw rate table rows.")
    shipping_classes: Dict[int, str] = Field(default_factory=dict, description="Shipping class names by id.")


class TableValidationRequest(BaseModel):
    rows: List[Dict[str, Any]]
    shipping_classes: Dict[int, str] = Field(default_factory=dict)


class RateRuleModel(BaseModel):
    max_distance: float
    min_order_quantity: float = 0
    max_order_quantity: float = 0
    min_order_amount: float = 0
    max_order_amount: float = 0
    rate_type: str
    class_rates: Dict[int, float]
    surcharge: float = 0
    total_cost_type: str
    total_cost_formula: str = ""
    shipping_label: str = ""


class RowErrorModel(BaseModel):
    row: int
    field: Optional[str] = None
    message: str


class TableValidationResponse(BaseModel):
    rules: List[RateRuleModel]


class RateCalculationRequest(BaseModel):
    method: MethodSettingsModel
    package: PackageModel
    calculator_mode: bool = Field(default=False, description="Request comes from the cart shipping calculator.")
    debug: Optional[bool] = Field(default=None, description="Override the configured debug mode.")


class ShippingRateModel(BaseModel):
    id: str
    label: str
    cost: float
    taxable: bool
    meta_data: dict
    breakdown: Optional[dict] = None


class RateCalculationResponse(BaseModel):
    rates: List[ShippingRateModel]
    diagnostics: List[str]


class ApiKeyVerifyRequest(BaseModel):
    api_key: str


class ApiKeyVerifyResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
