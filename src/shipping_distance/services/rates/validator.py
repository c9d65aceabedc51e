"""Turn raw rate table rows into a canonical, sorted rate table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Sequence

from ...config import settings
from ...errors import (
    DuplicateRuleError,
    EmptyTableError,
    FeatureGatedError,
    FieldValidationError,
    RateTableError,
    RowError,
)
from .fields import RateField, rate_fields, validate_field
from .models import RULE_FIELDS, ZERO, RateRule, RateTable

logger = logging.getLogger(__name__)

FORMULA_GATED_MESSAGE = 'Total cost type "Match Formula" options only available in pro version. Please upgrade!'


@dataclass(slots=True)
class ValidationReport:
    table: RateTable
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class RateTableValidator:
    """Validates every row, rejects duplicate rule combinations and sorts the survivors.

    Problems are collected across all rows rather than stopping at the first
    one, so a whole table can be fixed in a single pass.
    """

    def __init__(
        self,
        shipping_classes: Mapping[int, str] | None = None,
        *,
        pro_enabled: bool | None = None,
    ) -> None:
        self.fields: dict[str, RateField] = rate_fields(shipping_classes)
        self.pro_enabled = settings.pro_enabled if pro_enabled is None else pro_enabled

    def validate_row(self, index: int, row: Mapping[str, Any]) -> tuple[RateRule | None, list[RowError]]:
        number = index + 1
        values: dict[str, Any] = {}
        errors: list[RowError] = []

        for key, rate_field in self.fields.items():
            try:
                value = validate_field(rate_field, row.get(key), pro_enabled=self.pro_enabled)
                if key == "total_cost_type" and value == "formula" and not self.pro_enabled:
                    raise FeatureGatedError(FORMULA_GATED_MESSAGE)
                values[key] = value
            except (FieldValidationError, FeatureGatedError) as exc:
                errors.append(RowError(row=number, field=key, message=f"Table rates row {number}: {exc.message}"))

        if (
            not errors
            and values.get("total_cost_type") == "formula"
            and not values.get("total_cost_formula")
        ):
            title = self.fields["total_cost_formula"].title
            errors.append(
                RowError(
                    row=number,
                    field="total_cost_formula",
                    message=f"Table rates row {number}: {title} field is required",
                )
            )

        if errors:
            return None, errors
        return self._build_rule(values), []

    def _build_rule(self, values: Mapping[str, Any]) -> RateRule:
        class_rates: dict[int, Decimal] = {}
        for key, rate_field in self.fields.items():
            if rate_field.is_rate and values.get(key) is not None:
                class_rates[int(key.split("_", 1)[1])] = values[key]
        return RateRule(
            max_distance=values["max_distance"],
            min_order_quantity=values.get("min_order_quantity") or ZERO,
            max_order_quantity=values.get("max_order_quantity") or ZERO,
            min_order_amount=values.get("min_order_amount") or ZERO,
            max_order_amount=values.get("max_order_amount") or ZERO,
            rate_type=values["rate_type"],
            class_rates=class_rates,
            surcharge=values.get("surcharge") or ZERO,
            total_cost_type=values["total_cost_type"],
            total_cost_formula=values.get("total_cost_formula") or "",
            shipping_label=values.get("shipping_label") or "",
        )

    def check(self, rows: Sequence[Mapping[str, Any]]) -> ValidationReport:
        """Validate ``rows`` without raising; the report keeps every surviving rule."""
        errors: list[RowError] = []
        survivors: list[RateRule] = []
        seen: set[tuple] = set()

        for index, row in enumerate(rows):
            rule, row_errors = self.validate_row(index, row)
            if row_errors:
                errors.extend(row_errors)
                continue
            if rule.identity in seen:
                conflict = {
                    self.fields[name].title: str(value)
                    for name, value in zip(RULE_FIELDS, rule.identity)
                }
                duplicate = DuplicateRuleError(index + 1, conflict)
                errors.append(RowError(row=index + 1, message=duplicate.message))
                continue
            seen.add(rule.identity)
            survivors.append(rule)

        if errors:
            logger.info("Rate table validation found %s problem(s) in %s row(s)", len(errors), len(rows))
        return ValidationReport(table=RateTable.from_rules(survivors), errors=errors)

    def validate(self, rows: Sequence[Mapping[str, Any]]) -> RateTable:
        report = self.check(rows)
        if report.errors:
            raise RateTableError(report.errors)
        if not report.table:
            raise EmptyTableError()
        return report.table


def validate_table_rates(
    rows: Sequence[Mapping[str, Any]],
    shipping_classes: Mapping[int, str] | None = None,
    *,
    pro_enabled: bool | None = None,
) -> RateTable:
    return RateTableValidator(shipping_classes, pro_enabled=pro_enabled).validate(rows)
