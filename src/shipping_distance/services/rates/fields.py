"""Rate table field catalogue and per-kind field validators."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ...errors import FieldValidationError
from .models import ZERO


class FieldKind(str, Enum):
    NUMBER = "number"
    SELECT = "select"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class RateField:
    key: str
    title: str
    kind: FieldKind = FieldKind.TEXT
    default: str = ""
    required: bool = False
    minimum: Optional[Decimal] = None
    exclusive_minimum: bool = False
    maximum: Optional[Decimal] = None
    options: tuple[str, ...] = ()
    is_rule: bool = False
    is_rate: bool = False
    is_pro: bool = False

    def error(self, message: str) -> FieldValidationError:
        return FieldValidationError(self.key, self.title, f"{self.title} {message}")


FieldValue = Optional[Decimal | str]


def _validate_text(field: RateField, text: str) -> FieldValue:
    return text


def _validate_number(field: RateField, text: str) -> FieldValue:
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise field.error("field value must be numeric") from exc
    if not value.is_finite():
        raise field.error("field value must be numeric")
    if field.minimum is not None:
        if field.exclusive_minimum and value <= field.minimum:
            raise field.error(f"field value must be greater than {field.minimum}")
        if not field.exclusive_minimum and value < field.minimum:
            raise field.error(f"field value cannot be lower than {field.minimum}")
    if field.maximum is not None and value > field.maximum:
        raise field.error(f"field value cannot be greater than {field.maximum}")
    return value


def _validate_select(field: RateField, text: str) -> FieldValue:
    if text not in field.options:
        raise field.error("field value selected does not exist")
    return text


VALIDATORS: dict[FieldKind, Callable[[RateField, str], FieldValue]] = {
    FieldKind.NUMBER: _validate_number,
    FieldKind.SELECT: _validate_select,
    FieldKind.TEXT: _validate_text,
}


def _is_default(field: RateField, value: FieldValue) -> bool:
    if isinstance(value, Decimal):
        try:
            return value == Decimal(field.default or "0")
        except InvalidOperation:
            return False
    return (value or "") == field.default


def validate_field(field: RateField, raw: Any, *, pro_enabled: bool = False) -> FieldValue:
    """Coerce and check one submitted value.

    Blank input falls back to the field default unless the field is required.
    Pro-only fields accept nothing but their default when pro is disabled.
    """
    text = "" if raw is None else str(raw).strip()
    if not text:
        if field.required:
            raise field.error("field is required")
        text = field.default

    value = VALIDATORS[field.kind](field, text)

    if field.is_pro and not pro_enabled and not _is_default(field, value):
        raise field.error("field value only changeable in pro version. Please upgrade!")
    return value


TOTAL_COST_TYPES = (
    "flat__highest",
    "flat__average",
    "flat__lowest",
    "progressive__per_shipping_class",
    "progressive__per_product",
    "progressive__per_item",
    "formula",
)


def _order_rule(key: str, title: str) -> RateField:
    return RateField(
        key=key,
        title=title,
        kind=FieldKind.NUMBER,
        default="0",
        minimum=ZERO,
        is_rule=True,
        is_pro=True,
    )


def rate_fields(shipping_classes: Mapping[int, str] | None = None) -> dict[str, RateField]:
    """Ordered field catalogue for one rate row, with a rate field per shipping class."""
    fields = [
        RateField(
            key="max_distance",
            title="Maximum Distances",
            kind=FieldKind.NUMBER,
            default="1",
            required=True,
            minimum=ZERO,
            exclusive_minimum=True,
            is_rule=True,
        ),
        _order_rule("min_order_quantity", "Minimum Order Quantity"),
        _order_rule("max_order_quantity", "Maximum Order Quantity"),
        _order_rule("min_order_amount", "Minimum Order Amount"),
        _order_rule("max_order_amount", "Maximum Order Amount"),
        RateField(
            key="rate_type",
            title="Rate Type",
            kind=FieldKind.SELECT,
            default="fixed",
            required=True,
            options=("fixed", "flexible"),
        ),
        RateField(
            key="class_0",
            title="Shipping Rate",
            kind=FieldKind.NUMBER,
            default="0",
            required=True,
            minimum=ZERO,
            is_rate=True,
        ),
    ]
    for class_id, name in sorted((shipping_classes or {}).items()):
        if int(class_id) == 0:
            continue
        fields.append(
            RateField(
                key=f"class_{class_id}",
                title=f'"{name}" Shipping Class Rate',
                kind=FieldKind.NUMBER,
                minimum=ZERO,
                is_rate=True,
            )
        )
    fields.extend(
        [
            RateField(
                key="surcharge",
                title="Surcharge",
                kind=FieldKind.NUMBER,
                default="0",
                minimum=ZERO,
            ),
            RateField(
                key="total_cost_type",
                title="Total Cost Type",
                kind=FieldKind.SELECT,
                default="flat__highest",
                required=True,
                options=TOTAL_COST_TYPES,
            ),
            RateField(key="total_cost_formula", title="Total Cost Formula", is_pro=True),
            RateField(key="shipping_label", title="Label"),
        ]
    )
    return {field.key: field for field in fields}
