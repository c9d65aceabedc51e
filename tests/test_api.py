from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shipping_distance.api.routes import health
from shipping_distance.errors import ProviderError
from shipping_distance.main import create_app
from shipping_distance.services.distance.cache import RequestCache
from shipping_distance.services.distance.models import DistanceResult
from shipping_distance.services.shipping import service as shipping_service

ROWS = [
    {"max_distance": "25", "rate_type": "flexible", "class_0": "2", "total_cost_type": "progressive__per_item"},
    {"max_distance": "10", "rate_type": "fixed", "class_0": "10", "surcharge": "5", "total_cost_type": "flat__highest"},
]


class DummyClient:
    def __init__(self, api_key=None, distance: str = "12.0", error: Exception | None = None) -> None:
        self.api_key = api_key
        self.distance = Decimal(distance)
        self.error = error

    def fetch(self, query, diagnostics=None):
        if self.error is not None:
            raise self.error
        return DistanceResult(
            distance=self.distance,
            distance_text=f"{self.distance} km",
            duration_seconds=1200,
            duration_text="20 mins",
            raw_payload={"status": "OK"},
        )


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(shipping_service, "request_cache", RequestCache(ttl_seconds=3600))
    monkeypatch.setattr(shipping_service, "DistanceMatrixClient", lambda api_key=None: DummyClient(api_key))
    return TestClient(create_app())


def _calculation(**method_overrides) -> dict:
    method = {
        "instance_id": 7,
        "shipping_label": "Courier",
        "api_key": "secret-key",
        "origin": {"lat": -6.175392, "lng": 106.827156},
        "show_distance": True,
        "table_rates": ROWS,
    }
    method.update(method_overrides)
    return {
        "method": method,
        "package": {
            "contents": [
                {"product_id": "p1", "quantity": 2, "unit_price": "10"},
                {"product_id": "p2", "quantity": 1, "unit_price": "4"},
            ],
            "destination": {
                "address_1": "Jl. Sudirman 1",
                "city": "Jakarta",
                "postcode": "10220",
                "country": "ID",
            },
        },
    }


def test_root_and_health(api_client: TestClient):
    root = api_client.get("/")
    assert root.status_code == 200
    assert root.json()["status"] == "running"

    response = api_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_distance_api_health(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(health, "check_health", lambda: True)

    response = api_client.get("/api/health/distance-api")

    assert response.status_code == 200
    assert response.json() == {"service": "distance-matrix", "healthy": True}


def test_validate_table_returns_sorted_rules(api_client: TestClient):
    response = api_client.post("/api/rates/table/validate", json={"rows": ROWS})

    assert response.status_code == 200
    rules = response.json()["rules"]
    assert [rule["max_distance"] for rule in rules] == [10.0, 25.0]
    assert rules[0]["class_rates"] == {"0": 10.0}


def test_validate_table_reports_every_row_error(api_client: TestClient):
    rows = [
        {"max_distance": "abc", "rate_type": "fixed", "class_0": "1", "total_cost_type": "flat__highest"},
        {"max_distance": "10", "rate_type": "fixed", "class_0": "", "total_cost_type": "flat__highest"},
    ]

    response = api_client.post("/api/rates/table/validate", json={"rows": rows})

    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert [error["row"] for error in errors] == [1, 2]
    assert errors[0]["message"] == "Table rates row 1: Maximum Distances field value must be numeric"
    assert errors[1]["field"] == "class_0"


def test_validate_empty_table(api_client: TestClient):
    response = api_client.post("/api/rates/table/validate", json={"rows": []})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "empty_table"


def test_calculate_rates(api_client: TestClient):
    response = api_client.post("/api/rates/calculate", json=_calculation())

    assert response.status_code == 200
    body = response.json()
    assert body["diagnostics"] == []
    [rate] = body["rates"]
    assert rate["id"] == "sdm:7"
    assert rate["label"] == "Courier (12.0 km)"
    assert rate["cost"] == pytest.approx(2 * 12 * 3)
    assert rate["meta_data"]["distance"] == "12.0"
    assert rate["breakdown"]["total_cost_type"] == "progressive__per_item"


def test_calculate_rates_with_failed_lookup(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    error = ProviderError("REQUEST_DENIED", "The provided API key is invalid.")
    monkeypatch.setattr(
        shipping_service,
        "DistanceMatrixClient",
        lambda api_key=None: DummyClient(api_key, error=error),
    )

    payload = _calculation()
    payload["debug"] = True
    response = api_client.post("/api/rates/calculate", json=payload)

    assert response.status_code == 200
    assert response.json()["rates"] == []
    assert f"SDM_ERROR => {error.message}" in response.json()["diagnostics"]


def test_calculate_rejects_invalid_table(api_client: TestClient):
    response = api_client.post(
        "/api/rates/calculate",
        json=_calculation(table_rates=[{"max_distance": "-1", "rate_type": "fixed", "class_0": "1"}]),
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"][0]["row"] == 1


def test_calculate_rejects_address_picker_without_pro(api_client: TestClient):
    response = api_client.post("/api/rates/calculate", json=_calculation(enable_address_picker=True))

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "enable_address_picker"


def test_verify_api_key(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    response = api_client.post("/api/settings/api-key/verify", json={"api_key": "good-key"})
    assert response.json() == {"valid": True, "error": None}

    error = ProviderError("REQUEST_DENIED", "The provided API key is invalid.")
    monkeypatch.setattr(
        shipping_service,
        "DistanceMatrixClient",
        lambda api_key=None: DummyClient(api_key, error=error),
    )
    response = api_client.post("/api/settings/api-key/verify", json={"api_key": "bad-key"})

    assert response.status_code == 200
    assert response.json() == {"valid": False, "error": error.message}
