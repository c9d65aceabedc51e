from decimal import Decimal

import httpx

from shipping_distance.models.domain import Address, Coordinate, LineItem, Package
from shipping_distance.services.distance.cache import RequestCache, fingerprint
from shipping_distance.services.distance.client import DistanceMatrixClient
from shipping_distance.services.rates.validator import validate_table_rates
from shipping_distance.services.shipping.models import MethodSettings
from shipping_distance.services.shipping.service import ShippingCalculator


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = RequestCache(ttl_seconds=3600, clock=clock)
    cache.put("key", "value")

    clock.now += 3599
    assert cache.get("key") == "value"

    clock.now += 1
    assert cache.get("key") is None
    assert len(cache) == 0


def test_put_replaces_previous_entry():
    cache = RequestCache(ttl_seconds=60, clock=FakeClock())
    cache.put("key", "old")
    cache.put("key", "new")

    assert cache.get("key") == "new"
    assert len(cache) == 1


def test_zero_ttl_stores_nothing():
    cache = RequestCache(ttl_seconds=60, clock=FakeClock())
    cache.put("key", "value", ttl=0)
    assert "key" not in cache


def test_oldest_entries_are_evicted_beyond_capacity():
    cache = RequestCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_fingerprint_is_stable_and_order_independent():
    first = fingerprint({"lat": 1, "lng": 2}, "Jakarta", {"contents": []}, {"a": 1, "b": 2})
    second = fingerprint({"lng": 2, "lat": 1}, "Jakarta", {"contents": []}, {"b": 2, "a": 1})

    assert first == second
    assert first.startswith("sdm_api_request_")


def test_fingerprint_changes_with_any_input():
    base = fingerprint("A", "B", {"contents": [1]}, {"unit": "metric"})

    assert fingerprint("A2", "B", {"contents": [1]}, {"unit": "metric"}) != base
    assert fingerprint("A", "B2", {"contents": [1]}, {"unit": "metric"}) != base
    assert fingerprint("A", "B", {"contents": [2]}, {"unit": "metric"}) != base
    assert fingerprint("A", "B", {"contents": [1]}, {"unit": "imperial"}) != base


def _calculator(calls: list, cache: RequestCache, **settings_overrides) -> ShippingCalculator:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "rows": [
                    {
                        "elements": [
                            {
                                "status": "OK",
                                "distance": {"value": 8000, "text": "8.0 km"},
                                "duration": {"value": 900, "text": "15 mins"},
                            }
                        ]
                    }
                ],
            },
        )

    table = validate_table_rates(
        [{"max_distance": "20", "rate_type": "fixed", "class_0": "10", "total_cost_type": "flat__highest"}]
    )
    method = MethodSettings(
        instance_id=3,
        api_key="secret-key",
        origin=Coordinate(-6.175392, 106.827156),
        table_rates=table,
        **settings_overrides,
    )
    client = DistanceMatrixClient(
        api_key="secret-key",
        base_url="https://maps.example.test/distancematrix/json",
        transport=httpx.MockTransport(handler),
    )
    return ShippingCalculator(method, client=client, cache=cache, debug=False)


def _package(quantity: int = 1) -> Package:
    return Package(
        contents=(LineItem(product_id="p1", quantity=quantity, unit_price=Decimal("5")),),
        destination=Address(address_1="Jl. Sudirman 1", city="Jakarta", postcode="10220", country="ID"),
    )


def test_identical_calculations_issue_one_request():
    calls: list = []
    cache = RequestCache(ttl_seconds=3600, clock=FakeClock())
    calculator = _calculator(calls, cache)

    first = calculator.calculate(_package())
    second = calculator.calculate(_package())

    assert len(calls) == 1
    assert first[0].cost == second[0].cost == Decimal("10")


def test_changed_inputs_force_fresh_request():
    calls: list = []
    cache = RequestCache(ttl_seconds=3600, clock=FakeClock())

    _calculator(calls, cache).calculate(_package())
    _calculator(calls, cache).calculate(_package(quantity=2))
    _calculator(calls, cache, travel_mode="walking").calculate(_package())

    assert len(calls) == 3


def test_debug_mode_bypasses_cache():
    calls: list = []
    cache = RequestCache(ttl_seconds=3600, clock=FakeClock())
    calculator = _calculator(calls, cache)
    calculator.debug = True

    calculator.calculate(_package())
    calculator.calculate(_package())

    assert len(calls) == 2
    assert len(cache) == 0


def test_clear_drops_every_entry():
    cache = RequestCache(ttl_seconds=60, clock=FakeClock())
    cache.put("a", 1)
    cache.put("b", 2)

    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None
