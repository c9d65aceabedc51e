from decimal import Decimal

import pytest

from shipping_distance.errors import EmptyTableError, RateTableError
from shipping_distance.services.rates.models import RateRule, RateTable
from shipping_distance.services.rates.validator import RateTableValidator, validate_table_rates


def _row(max_distance: str, **overrides) -> dict:
    row = {
        "max_distance": max_distance,
        "rate_type": "fixed",
        "class_0": "10",
        "total_cost_type": "flat__highest",
    }
    row.update(overrides)
    return row


def test_rows_are_sorted_by_identity():
    table = validate_table_rates([_row("50"), _row("10"), _row("25")])

    assert [rule.max_distance for rule in table] == [Decimal("10"), Decimal("25"), Decimal("50")]
    assert table.is_sorted()


def test_sorting_is_idempotent():
    table = validate_table_rates(
        [
            _row("20", min_order_quantity="5", max_order_quantity="10"),
            _row("20", min_order_quantity="1"),
            _row("5"),
        ],
        pro_enabled=True,
    )
    resorted = RateTable.from_rules(table.rules)

    assert resorted == table
    assert all(a.identity <= b.identity for a, b in zip(table.rules, table.rules[1:]))
    assert [rule.min_order_quantity for rule in table] == [Decimal("0"), Decimal("1"), Decimal("5")]


def test_duplicate_rule_combination_rejects_later_row():
    with pytest.raises(RateTableError) as excinfo:
        validate_table_rates([_row("10"), _row("20"), _row("10.0", class_0="99")])

    errors = excinfo.value.errors
    assert len(errors) == 1
    assert errors[0].row == 3
    assert errors[0].message.startswith(
        "Each shipping rules combination for each row must be unique. "
        "Please fix duplicate shipping rules for rate row 3: Maximum Distances: 10.0"
    )


def test_all_row_errors_are_collected_in_one_pass():
    rows = [
        _row("", class_0="abc"),
        _row("10"),
        _row("-5", rate_type="weekly"),
    ]

    with pytest.raises(RateTableError) as excinfo:
        validate_table_rates(rows)

    messages = [error.message for error in excinfo.value.errors]
    assert messages == [
        "Table rates row 1: Maximum Distances field is required",
        "Table rates row 1: Shipping Rate field value must be numeric",
        "Table rates row 3: Maximum Distances field value must be greater than 0",
        "Table rates row 3: Rate Type field value selected does not exist",
    ]
    assert {error.field for error in excinfo.value.errors} == {"max_distance", "class_0", "rate_type"}


def test_check_reports_errors_and_keeps_survivors():
    report = RateTableValidator().check([_row("10"), _row("0")])

    assert not report.ok
    assert len(report.table) == 1
    assert report.errors[0].message == "Table rates row 2: Maximum Distances field value must be greater than 0"


def test_empty_table_is_rejected():
    with pytest.raises(EmptyTableError, match="Shipping rates table is empty"):
        validate_table_rates([])


def test_negative_rates_are_rejected():
    with pytest.raises(RateTableError, match="Surcharge field value cannot be lower than 0"):
        validate_table_rates([_row("10", surcharge="-1")])


def test_order_rules_require_pro():
    with pytest.raises(RateTableError, match="only changeable in pro version"):
        validate_table_rates([_row("10", min_order_quantity="3")], pro_enabled=False)

    table = validate_table_rates([_row("10", min_order_quantity="3")], pro_enabled=True)
    assert table[0].min_order_quantity == Decimal("3")


def test_formula_total_cost_requires_pro():
    row = _row("10", total_cost_type="formula", total_cost_formula="distance * 2")

    with pytest.raises(RateTableError, match='"Match Formula" options only available in pro version'):
        validate_table_rates([row], pro_enabled=False)

    table = validate_table_rates([row], pro_enabled=True)
    assert table[0].total_cost_formula == "distance * 2"


def test_formula_type_needs_expression():
    with pytest.raises(RateTableError, match="Total Cost Formula field is required"):
        validate_table_rates([_row("10", total_cost_type="formula")], pro_enabled=True)


def test_shipping_class_rates_are_parsed():
    table = validate_table_rates(
        [_row("10", class_5="2.5", class_7="")],
        shipping_classes={5: "Bulky", 7: "Fragile"},
    )
    rule: RateRule = table[0]

    assert rule.class_rates == {0: Decimal("10"), 5: Decimal("2.5")}
    assert rule.class_rate(5) == Decimal("2.5")
    assert rule.class_rate(7) == Decimal("10")


def test_shipping_class_rate_error_uses_class_name():
    with pytest.raises(RateTableError) as excinfo:
        validate_table_rates([_row("10", class_5="x")], shipping_classes={5: "Bulky"})

    assert excinfo.value.errors[0].message == (
        'Table rates row 1: "Bulky" Shipping Class Rate field value must be numeric'
    )
