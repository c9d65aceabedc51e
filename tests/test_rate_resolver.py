from decimal import Decimal

import pytest

from shipping_distance.errors import FeatureGatedError, NoMatchError
from shipping_distance.models.domain import LineItem, Package
from shipping_distance.services.rates.models import RateRule, RateTable
from shipping_distance.services.rates.resolver import compute_cost, find_rule


def _rule(max_distance: str, **kwargs) -> RateRule:
    kwargs.setdefault("class_rates", {0: Decimal("10")})
    return RateRule(max_distance=Decimal(max_distance), **kwargs)


@pytest.fixture
def bins() -> RateTable:
    return RateTable.from_rules([_rule("25"), _rule("50"), _rule("10")])


@pytest.mark.parametrize(
    ("distance", "expected"),
    [
        ("0.1", Decimal("10")),
        ("10", Decimal("10")),
        ("10.01", Decimal("25")),
        ("25", Decimal("25")),
        ("50.0", Decimal("50")),
    ],
)
def test_find_rule_uses_half_open_bins(bins, distance, expected):
    assert find_rule(Decimal(distance), bins).max_distance == expected


def test_find_rule_beyond_last_bin_raises(bins):
    with pytest.raises(NoMatchError) as excinfo:
        find_rule(Decimal("50.01"), bins, "imperial")

    assert excinfo.value.message == "No shipping rates defined within distance range: 50.01 mi"


def test_zero_distance_matches_nothing(bins):
    with pytest.raises(NoMatchError):
        find_rule(Decimal("0"), bins)


def test_empty_table_matches_nothing():
    with pytest.raises(NoMatchError):
        find_rule(Decimal("1"), RateTable())


def _package(*items: LineItem) -> Package:
    return Package(contents=items)


def test_progressive_per_item_fixed_and_flexible():
    package = _package(
        LineItem(product_id="a", quantity=2),
        LineItem(product_id="b", quantity=2),
        LineItem(product_id="c", quantity=2),
    )
    fixed = _rule("10", rate_type="fixed", surcharge=Decimal("5"), total_cost_type="progressive__per_item")
    flexible = _rule("10", rate_type="flexible", surcharge=Decimal("5"), total_cost_type="progressive__per_item")

    assert compute_cost(fixed, package, Decimal("4")).total == Decimal("65")
    assert compute_cost(flexible, package, Decimal("4")).total == Decimal("245")


@pytest.fixture
def mixed_package() -> Package:
    return _package(
        LineItem(product_id="a", quantity=1, shipping_class_id=0),
        LineItem(product_id="b", quantity=3, shipping_class_id=5),
        LineItem(product_id="c", quantity=2, shipping_class_id=7),
        LineItem(product_id="c", quantity=1, shipping_class_id=7),
    )


@pytest.mark.parametrize(
    ("total_cost_type", "expected"),
    [
        ("flat__highest", Decimal("20")),
        ("flat__lowest", Decimal("4")),
        ("flat__average", Decimal("34") / 3),
        ("progressive__per_shipping_class", Decimal("34")),
        ("progressive__per_product", Decimal("34")),
        ("progressive__per_item", Decimal("10") + Decimal("12") + Decimal("60")),
    ],
)
def test_total_cost_types(mixed_package, total_cost_type, expected):
    rule = _rule(
        "10",
        class_rates={0: Decimal("10"), 5: Decimal("4"), 7: Decimal("20")},
        total_cost_type=total_cost_type,
    )
    assert compute_cost(rule, mixed_package, Decimal("3")).subtotal == expected


def test_missing_class_rate_falls_back_to_default_and_zero_is_kept():
    rule = _rule("10", class_rates={0: Decimal("8"), 5: Decimal("0")}, total_cost_type="progressive__per_item")
    package = _package(
        LineItem(product_id="a", quantity=1, shipping_class_id=5),
        LineItem(product_id="b", quantity=1, shipping_class_id=9),
    )

    breakdown = compute_cost(rule, package, Decimal("1"))

    assert breakdown.per_class == {5: Decimal("0"), 9: Decimal("8")}
    assert breakdown.total == Decimal("8")


def test_label_uses_row_override_and_distance_text():
    package = _package(LineItem(product_id="a"))

    default = compute_cost(_rule("10"), package, Decimal("2"), default_label="Courier", distance_text="2.0 km")
    override = compute_cost(_rule("10", shipping_label="Express"), package, Decimal("2"), default_label="Courier")

    assert default.label == "Courier (2.0 km)"
    assert override.label == "Express"


def test_formula_total_cost():
    rule = _rule(
        "10",
        class_rates={0: Decimal("3")},
        total_cost_type="formula",
        total_cost_formula="max(distance * 2, quantity * highest)",
        surcharge=Decimal("1"),
    )
    package = _package(LineItem(product_id="a", quantity=4, unit_price=Decimal("2.50")))

    breakdown = compute_cost(rule, package, Decimal("5"), pro_enabled=True)

    assert breakdown.subtotal == Decimal("12")
    assert breakdown.total == Decimal("13")


def test_formula_total_cost_is_gated():
    rule = _rule("10", total_cost_type="formula", total_cost_formula="distance")

    with pytest.raises(FeatureGatedError):
        compute_cost(rule, _package(LineItem(product_id="a")), Decimal("5"), pro_enabled=False)
