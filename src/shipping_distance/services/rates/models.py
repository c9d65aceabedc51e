"""Rate table domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from operator import attrgetter
from typing import Iterable, Iterator, Literal, Mapping

RateType = Literal["fixed", "flexible"]
TotalCostType = Literal[
    "flat__highest",
    "flat__average",
    "flat__lowest",
    "progressive__per_shipping_class",
    "progressive__per_product",
    "progressive__per_item",
    "formula",
]

RULE_FIELDS = (
    "max_distance",
    "min_order_quantity",
    "max_order_quantity",
    "min_order_amount",
    "max_order_amount",
)

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class RateRule:
    max_distance: Decimal
    min_order_quantity: Decimal = ZERO
    max_order_quantity: Decimal = ZERO
    min_order_amount: Decimal = ZERO
    max_order_amount: Decimal = ZERO
    rate_type: RateType = "fixed"
    class_rates: Mapping[int, Decimal] = field(default_factory=dict, hash=False)
    surcharge: Decimal = ZERO
    total_cost_type: TotalCostType = "flat__highest"
    total_cost_formula: str = ""
    shipping_label: str = ""

    @property
    def identity(self) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal]:
        return (
            self.max_distance,
            self.min_order_quantity,
            self.max_order_quantity,
            self.min_order_amount,
            self.max_order_amount,
        )

    def class_rate(self, class_id: int) -> Decimal:
        """Rate for a shipping class: its own override, else the default class_0 rate, else 0."""
        if class_id in self.class_rates:
            return self.class_rates[class_id]
        return self.class_rates.get(0, ZERO)

    def to_dict(self) -> dict:
        data = {name: str(getattr(self, name)) for name in RULE_FIELDS}
        data.update(
            {
                "rate_type": self.rate_type,
                "surcharge": str(self.surcharge),
                "total_cost_type": self.total_cost_type,
                "total_cost_formula": self.total_cost_formula,
                "shipping_label": self.shipping_label,
            }
        )
        for class_id, rate in sorted(self.class_rates.items()):
            data[f"class_{class_id}"] = str(rate)
        return data


@dataclass(frozen=True, slots=True)
class RateTable:
    """Rules ordered ascending by their identity tuple."""

    rules: tuple[RateRule, ...] = ()

    @classmethod
    def from_rules(cls, rules: Iterable[RateRule]) -> "RateTable":
        return cls(tuple(sorted(rules, key=attrgetter("identity"))))

    def is_sorted(self) -> bool:
        return all(a.identity <= b.identity for a, b in zip(self.rules, self.rules[1:]))

    def __iter__(self) -> Iterator[RateRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> RateRule:
        return self.rules[index]


@dataclass(slots=True)
class CostBreakdown:
    total: Decimal
    subtotal: Decimal
    surcharge: Decimal
    total_cost_type: str
    per_class: dict[int, Decimal]
    per_product: dict[str, Decimal]
    per_item: Decimal
    label: str
    rule: RateRule

    def to_dict(self) -> dict:
        return {
            "total": str(self.total),
            "subtotal": str(self.subtotal),
            "surcharge": str(self.surcharge),
            "total_cost_type": self.total_cost_type,
            "per_class": {str(class_id): str(cost) for class_id, cost in self.per_class.items()},
            "per_product": {product_id: str(cost) for product_id, cost in self.per_product.items()},
            "per_item": str(self.per_item),
            "label": self.label,
        }
