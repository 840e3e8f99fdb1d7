from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

CUSTOMER = {"X-User-Id": "u-1"}
STAFF = {"X-User-Id": "ops-1", "X-User-Role": "staff"}
ADDRESS = {
    "name": "Ada",
    "street_1": "1 Loop St",
    "city": "Tashkent",
    "country": "UZ",
    "postal_code": "100000",
}


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "storefront_orders.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("STOREFRONT_SHIPPING_FEE_CENTS", "500")

    from scripts.seed_data import seed_catalog
    from services.storefront.app.db.database import db_session
    from services.storefront.app.main import app

    with TestClient(app) as c:
        db = db_session()
        try:
            seed_catalog(db)
        finally:
            db.close()
        yield c


def _product_ids(client: TestClient) -> dict[str, str]:
    products = client.get("/v1/products", params={"region_id": "uz"}).json()
    return {p["slug"]: p["id"] for p in products}


def _place(client: TestClient, key: str = "key-1", **body: object):
    payload = {"shipping_address": ADDRESS, **body}
    return client.post("/v1/orders", json=payload, headers={**CUSTOMER, "Idempotency-Key": key})


def test_checkout_flow_returns_priced_order(client: TestClient) -> None:
    ids = _product_ids(client)
    item = {"product_id": ids["segfault"], "quantity": 2}
    client.post("/v1/cart/items", json=item, headers=CUSTOMER)
    client.post("/v1/cart/items", json={"product_id": ids["cron"]}, headers=CUSTOMER)

    quote = client.get("/v1/cart/quote", headers=CUSTOMER)
    assert quote.status_code == 200
    assert quote.json()["total_cents"] == 7400

    resp = _place(client)
    assert resp.status_code == 201

    data = resp.json()
    assert data["status"] == "pending"
    assert data["subtotal_cents"] == 7400
    assert data["shipping_cents"] == 0
    assert data["total_cents"] == 7400
    assert data["shipping_address"]["city"] == "Tashkent"
    assert [i["product_name"] for i in data["items"]] == ["segfault", "cron"]

    assert client.get("/v1/cart", headers=CUSTOMER).json() == []


def test_resubmission_with_same_key_returns_same_order(client: TestClient) -> None:
    ids = _product_ids(client)
    client.post("/v1/cart/items", json={"product_id": ids["404"]}, headers=CUSTOMER)

    first = _place(client, key="abc")
    second = _place(client, key="abc")

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]
    assert len(client.get("/v1/orders", headers=CUSTOMER).json()) == 1


def test_missing_idempotency_key_is_422(client: TestClient) -> None:
    resp = client.post("/v1/orders", json={"shipping_address": ADDRESS}, headers=CUSTOMER)
    assert resp.status_code == 422


def test_missing_user_header_is_422(client: TestClient) -> None:
    resp = client.get("/v1/cart")
    assert resp.status_code == 422


def test_empty_cart_is_409(client: TestClient) -> None:
    resp = _place(client)
    assert resp.status_code == 409
    assert "empty" in resp.json()["detail"]


def test_incomplete_address_is_422(client: TestClient) -> None:
    ids = _product_ids(client)
    client.post("/v1/cart/items", json={"product_id": ids["404"]}, headers=CUSTOMER)

    resp = client.post(
        "/v1/orders",
        json={"shipping_address": {**ADDRESS, "postal_code": ""}},
        headers={**CUSTOMER, "Idempotency-Key": "k"},
    )
    assert resp.status_code == 422
    assert "postal code" in resp.json()["detail"]


def test_status_transitions_over_http(client: TestClient) -> None:
    ids = _product_ids(client)
    client.post("/v1/cart/items", json={"product_id": ids["dark-mode"]}, headers=CUSTOMER)
    order_id = _place(client).json()["id"]
    url = f"/v1/orders/{order_id}/status"

    assert client.post(url, json={"status": "processing"}, headers=CUSTOMER).status_code == 403

    resp = client.post(url, json={"status": "processing"}, headers=STAFF)
    assert resp.status_code == 200
    assert resp.json()["status"] == "processing"

    assert client.post(url, json={"status": "cancelled"}, headers=STAFF).status_code == 200
    assert client.post(url, json={"status": "shipped"}, headers=STAFF).status_code == 409
    assert client.post(url, json={"status": "bogus"}, headers=STAFF).status_code == 422

    events = client.get(f"/v1/orders/{order_id}/events", headers=CUSTOMER).json()
    assert [e["event_type"] for e in events] == [
        "ORDER_CREATED",
        "ORDER_STATUS_CHANGED",
        "ORDER_STATUS_CHANGED",
    ]
    assert events[-1]["payload"] == {"from": "processing", "to": "cancelled", "actor": "ops-1"}


def test_other_users_cannot_read_order(client: TestClient) -> None:
    ids = _product_ids(client)
    client.post("/v1/cart/items", json={"product_id": ids["dark-mode"]}, headers=CUSTOMER)
    order_id = _place(client).json()["id"]

    assert client.get(f"/v1/orders/{order_id}", headers={"X-User-Id": "u-2"}).status_code == 403
    assert client.get(f"/v1/orders/{order_id}", headers=STAFF).status_code == 200
    assert client.get("/v1/orders/missing", headers=CUSTOMER).status_code == 404


def test_unknown_role_is_400(client: TestClient) -> None:
    resp = client.get("/v1/cart", headers={"X-User-Id": "u-1", "X-User-Role": "root"})
    assert resp.status_code == 400


def test_missing_shipping_fee_config_is_500(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("STOREFRONT_SHIPPING_FEE_CENTS")

    resp = _place(client)
    assert resp.status_code == 500
    assert "STOREFRONT_SHIPPING_FEE_CENTS" in resp.json()["detail"]


def test_order_without_any_address_is_422(client: TestClient) -> None:
    ids = _product_ids(client)
    client.post("/v1/cart/items", json={"product_id": ids["404"]}, headers=CUSTOMER)

    resp = client.post("/v1/orders", json={}, headers={**CUSTOMER, "Idempotency-Key": "k"})
    assert resp.status_code == 422
    assert "No shipping address was given" in resp.json()["detail"]
