"""HTTP-level tests for the checkout API"""

import httpx
import pytest
from fastapi.testclient import TestClient

from checkout_service.main import app
from checkout_service.routes.checkout import get_orchestrator
from checkout_service.services.orchestrator import build_orchestrator
from mock_commerce.database import inventory_db
from mock_commerce.main import app as mock_app

BACKEND_URL = "http://localhost:8001"

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address1": "100 Pearl St",
    "city": "Portland",
    "state": "OR",
    "zip_code": "97209",
}


@pytest.fixture
def client(settings):
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=mock_app), base_url=BACKEND_URL)
    checkout = build_orchestrator(settings, http_client=http_client)
    app.dependency_overrides[get_orchestrator] = lambda: checkout
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _cart_with(client, product_id="ruby-velvet", shade_id="ruby-velvet-01", quantity=3, unit_price="28.00"):
    cart_id = client.post("/api/cart").json()["cart"]["cart_id"]
    response = client.post(f"/api/cart/{cart_id}/items", json={
        "product_id": product_id,
        "product_name": product_id.replace("-", " ").title(),
        "shade_id": shade_id,
        "quantity": quantity,
        "unit_price": unit_price,
    })
    assert response.status_code == 200
    return cart_id


def _start(client, cart_id):
    response = client.post("/api/checkout/sessions", json={
        "cart_id": cart_id,
        "identity": {"guest_session_id": "browser-1"},
    })
    assert response.status_code == 201
    return response.json()["session_id"]


def _to_review(client, session_id, payment_method="pm_card_visa"):
    base = f"/api/checkout/sessions/{session_id}"
    client.put(f"{base}/customer", json={"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"})
    assert client.post(f"{base}/advance").status_code == 200
    client.put(f"{base}/shipping", json={"address": ADDRESS, "shipping_rate_id": "standard"})
    assert client.post(f"{base}/advance").status_code == 200
    client.put(f"{base}/payment", json={"payment_method": payment_method})
    response = client.post(f"{base}/advance")
    assert response.status_code == 200
    assert response.json()["current_step"] == "review"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_cart_lines_merge_and_remove(client):
    cart_id = _cart_with(client, quantity=1)
    response = client.post(f"/api/cart/{cart_id}/items", json={
        "product_id": "ruby-velvet",
        "shade_id": "ruby-velvet-01",
        "quantity": 2,
        "unit_price": "28.00",
    })

    body = response.json()
    assert len(body["cart"]["items"]) == 1
    assert body["cart"]["items"][0]["quantity"] == 3
    assert body["subtotal"] == "84.00"

    response = client.delete(f"/api/cart/{cart_id}/items/ruby-velvet", params={"shade_id": "ruby-velvet-01"})
    assert response.json()["cart"]["items"] == []

    response = client.put(f"/api/cart/{cart_id}/items/ruby-velvet", json={"quantity": 1})
    assert response.status_code == 404


def test_unknown_cart_is_404(client):
    assert client.get("/api/cart/nope").status_code == 404


def test_full_checkout_places_the_order(client):
    cart_id = _cart_with(client)
    session_id = _start(client, cart_id)
    _to_review(client, session_id)

    response = client.post(f"/api/checkout/sessions/{session_id}/place-order")

    assert response.status_code == 200
    order = response.json()["order"]
    assert order["pricing"]["total"] == "84.00"
    assert response.json()["message"] == f"Order {order['order_number']} confirmed"

    assert order["session_id"] == session_id
    assert client.get(f"/api/checkout/sessions/{session_id}").status_code == 404
    assert client.post(f"/api/checkout/sessions/{session_id}/place-order").status_code == 404
    assert client.get(f"/api/checkout/orders/{order['order_id']}").status_code == 200
    assert client.get(f"/api/cart/{cart_id}").json()["cart"]["items"] == []


def test_invalid_step_is_422_with_field_errors(client):
    session_id = _start(client, _cart_with(client))

    response = client.post(f"/api/checkout/sessions/{session_id}/advance")

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "validation_failed"
    assert detail["current_step"] == "customer_info"
    assert "email" in detail["errors"]


def test_input_for_another_step_is_409(client):
    session_id = _start(client, _cart_with(client))

    response = client.put(
        f"/api/checkout/sessions/{session_id}/shipping",
        json={"address": ADDRESS, "shipping_rate_id": "standard"},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "step_mismatch"


def test_empty_cart_cannot_start_checkout(client):
    cart_id = client.post("/api/cart").json()["cart"]["cart_id"]

    response = client.post("/api/checkout/sessions", json={
        "cart_id": cart_id,
        "identity": {"guest_session_id": "browser-1"},
    })

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "empty_cart"


def test_declined_payment_is_402(client):
    session_id = _start(client, _cart_with(client))
    _to_review(client, session_id, payment_method="pm_card_declined")

    response = client.post(f"/api/checkout/sessions/{session_id}/place-order")

    assert response.status_code == 402
    session = client.get(f"/api/checkout/sessions/{session_id}").json()
    assert session["current_step"] == "payment"
    assert session["status"] == "payment_failed"


def test_sold_out_item_is_409(client):
    session_id = _start(client, _cart_with(client))
    _to_review(client, session_id)
    inventory_db.set_stock("ruby-velvet", "ruby-velvet-01", 2)

    response = client.post(f"/api/checkout/sessions/{session_id}/place-order")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "item_unavailable"


def test_shipping_rates_for_the_session_address(client):
    session_id = _start(client, _cart_with(client))
    base = f"/api/checkout/sessions/{session_id}"
    client.put(f"{base}/customer", json={"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"})
    client.post(f"{base}/advance")
    client.put(f"{base}/shipping", json={"address": ADDRESS})

    response = client.get(f"{base}/shipping-rates")

    assert response.status_code == 200
    assert [rate["id"] for rate in response.json()["shipping_rates"]] == ["standard", "express", "overnight"]


def test_cancelled_session_is_404(client):
    session_id = _start(client, _cart_with(client))

    assert client.delete(f"/api/checkout/sessions/{session_id}").status_code == 200
    assert client.get(f"/api/checkout/sessions/{session_id}").status_code == 404


def test_unknown_order_is_404(client):
    assert client.get("/api/checkout/orders/nope").status_code == 404


def test_pricing_outage_on_advance_is_503(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith(("/api/shipping", "/api/tax")):
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, json={"ok": True})

    checkout = build_orchestrator(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    app.dependency_overrides[get_orchestrator] = lambda: checkout
    try:
        with TestClient(app) as client:
            session_id = _start(client, _cart_with(client))
            base = f"/api/checkout/sessions/{session_id}"
            client.put(f"{base}/customer", json={"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"})
            client.post(f"{base}/advance")
            client.put(f"{base}/shipping", json={"address": ADDRESS, "shipping_rate_id": "standard"})

            response = client.post(f"{base}/advance")
            session = client.get(base).json()
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "pricing_unavailable"
    assert session["current_step"] == "shipping"
