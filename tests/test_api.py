"""Tests for API endpoints"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from api.index import app
from storefront.cart import get_cart_service

SESSION = {"X-Cart-Session": "sess-abc"}


@pytest.fixture
def client(cart_service):
    """Test client wired to the dict-backed Redis mock"""
    app.dependency_overrides[get_cart_service] = lambda: cart_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add(client, product_id="p1", price=500, quantity=1, variant_id=None):
    body = {
        "product": {"id": product_id, "name": f"Item {product_id}", "price": price, "image": "/x.jpg", "stock": 5},
        "quantity": quantity,
    }
    if variant_id:
        body["variant_id"] = variant_id
    return client.post("/api/cart/items", json=body, headers=SESSION)


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_session_header(client):
    """Test cart endpoints require a session"""
    response = client.get("/api/cart")
    assert response.status_code == 400


def test_empty_cart(client):
    """Test a new session has an empty, closed cart"""
    response = client.get("/api/cart", headers=SESSION)

    assert response.status_code == 200
    data = response.json()
    assert data["items"] == []
    assert data["item_count"] == 0
    assert data["total"] == 0
    assert data["is_open"] is False
    assert data["formatted_total"] == "$0.00"


def test_add_update_clear_flow(client):
    """Test the add / update / clear walk-through over HTTP"""
    _add(client, "p1", 500, 2)
    response = _add(client, "p2", 300, 1)

    data = response.json()
    assert data["item_count"] == 3
    assert data["total"] == 1300
    assert data["formatted_total"] == "$1,300.00"
    assert [item["product_id"] for item in data["items"]] == ["p1", "p2"]

    response = client.patch("/api/cart/items", json={"product_id": "p1", "quantity": 1}, headers=SESSION)
    assert response.json()["item_count"] == 2
    assert response.json()["total"] == 800

    response = client.delete("/api/cart", headers=SESSION)
    assert response.json()["items"] == []
    assert response.json()["total"] == 0


def test_cart_persists_between_requests(client):
    """Test state is loaded per session"""
    _add(client, "p1", 500, 2)

    assert client.get("/api/cart", headers=SESSION).json()["item_count"] == 2
    assert client.get("/api/cart", headers={"X-Cart-Session": "other"}).json()["item_count"] == 0


def test_add_merges_variants(client):
    """Test identity merge and variant distinction"""
    _add(client, "p1", quantity=1, variant_id="M")
    _add(client, "p1", quantity=2, variant_id="M")
    data = _add(client, "p1", quantity=1, variant_id="L").json()

    assert [(i["variant_id"], i["quantity"]) for i in data["items"]] == [("M", 3), ("L", 1)]


def test_remove_item(client):
    """Test removing a line and removing a missing line"""
    _add(client, "p1")
    _add(client, "p2")

    response = client.delete("/api/cart/items", params={"product_id": "p1"}, headers=SESSION)
    assert [i["product_id"] for i in response.json()["items"]] == ["p2"]

    response = client.delete("/api/cart/items", params={"product_id": "ghost"}, headers=SESSION)
    assert response.status_code == 200
    assert response.json()["item_count"] == 1


def test_update_to_zero_removes(client):
    _add(client, "p1", quantity=3)

    response = client.patch("/api/cart/items", json={"product_id": "p1", "quantity": 0}, headers=SESSION)

    assert response.json()["items"] == []


def test_panel_endpoints(client):
    """Test open/close/toggle only change visibility"""
    _add(client, "p1", quantity=2)

    assert client.post("/api/cart/open", headers=SESSION).json()["is_open"] is True
    assert client.post("/api/cart/toggle", headers=SESSION).json()["is_open"] is False
    data = client.post("/api/cart/toggle", headers=SESSION).json()
    assert data["is_open"] is True
    assert data["item_count"] == 2
    assert client.post("/api/cart/close", headers=SESSION).json()["is_open"] is False


def test_invalid_quantity_rejected(client):
    """Test zero quantity on add is a client error"""
    response = _add(client, "p1", quantity=0)

    assert response.status_code == 400
    assert client.get("/api/cart", headers=SESSION).json()["items"] == []


def test_malformed_product_rejected(client):
    """Test products without an id fail validation"""
    response = client.post(
        "/api/cart/items",
        json={"product": {"name": "No id", "price": 10}},
        headers=SESSION,
    )
    assert response.status_code == 422


def test_sale_price_savings(client):
    """Test savings from original price"""
    response = client.post(
        "/api/cart/items",
        json={
            "product": {"id": "p1", "name": "Tee", "price": 500, "originalPrice": 700, "stock": 3},
            "quantity": 2,
        },
        headers=SESSION,
    )

    data = response.json()
    assert data["savings"] == 400
    assert data["items"][0]["original_price"] == 700


def test_storage_outage(client, mock_redis):
    """Test Redis failures map to 503"""
    mock_redis.get = AsyncMock(side_effect=ConnectionError("upstash down"))

    response = client.get("/api/cart", headers=SESSION)

    assert response.status_code == 503


def test_sub_cent_amounts_rounded_in_response(client):
    """Test exact sub-cent totals are rounded only for display"""
    data = _add(client, "p1", "0.333", 3).json()

    assert data["items"][0]["price"] == 0.33
    assert data["items"][0]["line_total"] == 1.0
    assert data["total"] == 1.0
    assert data["formatted_total"] == "$1.00"


def test_currency_defaults_to_rupees(client, monkeypatch):
    """Test INR is used when CART_CURRENCY is unset"""
    monkeypatch.delenv("CART_CURRENCY", raising=False)

    data = _add(client, "p1", 1300, 1).json()

    assert data["currency"] == "INR"
    assert data["formatted_total"] == "1,300 ₹"


def test_padded_product_id_can_be_updated(client):
    """Test ids are matched after whitespace is stripped"""
    _add(client, " p1 ", 500, 2)

    response = client.patch("/api/cart/items", json={"product_id": " p1 ", "quantity": 5}, headers=SESSION)

    assert response.json()["items"][0]["product_id"] == "p1"
    assert response.json()["item_count"] == 5
