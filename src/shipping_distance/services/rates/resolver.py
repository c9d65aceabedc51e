"""Match a distance to a rate rule and price a package with it."""

from __future__ import annotations

import logging
from decimal import Decimal

from ...config import settings
from ...errors import FeatureGatedError, NoMatchError
from ...models.domain import Package
from ..distance.models import DistanceUnit
from ..distance.units import unit_label
from .formula import evaluate_formula
from .models import ZERO, CostBreakdown, RateRule, RateTable
from .validator import FORMULA_GATED_MESSAGE

logger = logging.getLogger(__name__)


def find_rule(distance: Decimal, table: RateTable, unit: DistanceUnit = "metric") -> RateRule:
    """Return the first rule whose distance bin contains ``distance``.

    Bins are half-open, ``(previous max_distance, max_distance]``, starting at
    zero. Only ``max_distance`` takes part in the scan; the order quantity and
    amount bounds identify a rule but are not matched here.
    """
    offset = ZERO
    for rule in table:
        if offset < distance <= rule.max_distance:
            return rule
        offset = rule.max_distance
    raise NoMatchError(distance, unit_label(unit))


def line_unit_cost(rule: RateRule, shipping_class_id: int, distance: Decimal) -> Decimal:
    rate = rule.class_rate(shipping_class_id)
    if rule.rate_type == "flexible":
        return rate * distance
    return rate


def compute_cost(
    rule: RateRule,
    package: Package,
    distance: Decimal,
    *,
    default_label: str = "",
    distance_text: str | None = None,
    pro_enabled: bool | None = None,
) -> CostBreakdown:
    pro = settings.pro_enabled if pro_enabled is None else pro_enabled

    per_class: dict[int, Decimal] = {}
    per_product: dict[str, Decimal] = {}
    per_item = ZERO
    for item in package.contents:
        unit_cost = line_unit_cost(rule, item.shipping_class_id, distance)
        per_class.setdefault(item.shipping_class_id, unit_cost)
        per_product.setdefault(item.product_id, unit_cost)
        per_item += unit_cost * item.quantity

    class_costs = list(per_class.values())
    highest = max(class_costs, default=ZERO)
    lowest = min(class_costs, default=ZERO)
    average = sum(class_costs, ZERO) / len(class_costs) if class_costs else ZERO
    per_class_total = sum(class_costs, ZERO)
    per_product_total = sum(per_product.values(), ZERO)

    match rule.total_cost_type:
        case "flat__average":
            subtotal = average
        case "flat__lowest":
            subtotal = lowest
        case "progressive__per_shipping_class":
            subtotal = per_class_total
        case "progressive__per_product":
            subtotal = per_product_total
        case "progressive__per_item":
            subtotal = per_item
        case "formula":
            if not pro:
                raise FeatureGatedError(FORMULA_GATED_MESSAGE)
            subtotal = evaluate_formula(
                rule.total_cost_formula,
                {
                    "distance": distance,
                    "quantity": Decimal(package.total_quantity),
                    "amount": package.subtotal,
                    "products": Decimal(len(per_product)),
                    "classes": Decimal(len(per_class)),
                    "highest": highest,
                    "lowest": lowest,
                    "average": average,
                    "per_class": per_class_total,
                    "per_product": per_product_total,
                    "per_item": per_item,
                },
            )
        case _:
            subtotal = highest

    label = rule.shipping_label or default_label
    if distance_text:
        label = f"{label} ({distance_text})"

    total = subtotal + rule.surcharge
    logger.debug("Cost for %s %s: %s + surcharge %s", rule.total_cost_type, rule.rate_type, subtotal, rule.surcharge)
    return CostBreakdown(
        total=total,
        subtotal=subtotal,
        surcharge=rule.surcharge,
        total_cost_type=rule.total_cost_type,
        per_class=per_class,
        per_product=per_product,
        per_item=per_item,
        label=label,
        rule=rule,
    )
