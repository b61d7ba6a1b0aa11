"""Tests for the mock backend: inventory reservations and payment rules."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from mock_commerce.database import inventory_db
from mock_commerce.main import app
from mock_commerce.models import LineItem, ReservationStatus

client = TestClient(app)


def _lines(quantity: int = 1):
    return [LineItem(product_id="rouge-noir", shade_id="rouge-noir-01", quantity=quantity)]


def _available() -> int:
    return inventory_db.get_stock("rouge-noir", "rouge-noir-01").available


def test_reserve_holds_stock_until_committed():
    reservation, failures = inventory_db.reserve(_lines(5), "guest-1", ttl_minutes=15)

    assert failures == []
    assert _available() == 20

    assert inventory_db.commit(reservation.ticket_id)
    stock = inventory_db.get_stock("rouge-noir", "rouge-noir-01")
    assert (stock.on_hand, stock.reserved, stock.available) == (20, 0, 20)


def test_reserve_is_all_or_nothing():
    lines = _lines(30) + [LineItem(product_id="crystal-clear", quantity=1)]

    reservation, failures = inventory_db.reserve(lines, "guest-1", ttl_minutes=15)

    assert reservation is None
    assert [(f.product_id, f.requested, f.available) for f in failures] == [("rouge-noir", 30, 25)]
    assert inventory_db.get_stock("crystal-clear").reserved == 0


def test_release_returns_stock():
    reservation, _ = inventory_db.reserve(_lines(3), "guest-1", ttl_minutes=15)

    assert inventory_db.release("guest-1", "payment_declined", ticket_id=reservation.ticket_id) == 1

    assert reservation.status == ReservationStatus.RELEASED
    assert reservation.release_reason == "payment_declined"
    assert _available() == 25
    assert not inventory_db.commit(reservation.ticket_id)


def test_release_by_another_holder_is_ignored():
    reservation, _ = inventory_db.reserve(_lines(), "guest-1", ttl_minutes=15)

    assert inventory_db.release("guest-2", "oops", ticket_id=reservation.ticket_id) == 0
    assert reservation.status == ReservationStatus.RESERVED


def test_release_by_reservation_key_only_touches_that_hold():
    first, _ = inventory_db.reserve(_lines(2), "user-1", ttl_minutes=15, reservation_key="sess-a:1")
    second, _ = inventory_db.reserve(_lines(1), "user-1", ttl_minutes=15, reservation_key="sess-b:1")

    response = client.post("/api/inventory/release", json={
        "items": [],
        "holder_id": "user-1",
        "reason": "reservation_error",
        "reservation_key": "sess-b:1",
    })

    assert response.json()["ok"] is True
    assert second.status == ReservationStatus.RELEASED
    assert first.status == ReservationStatus.RESERVED


def test_release_without_ticket_or_key_releases_nothing():
    reservation, _ = inventory_db.reserve(_lines(), "user-1", ttl_minutes=15)

    assert inventory_db.release("user-1", "reservation_error") == 0
    assert inventory_db.release("user-1", "reservation_error", reservation_key="never-used") == 0
    assert reservation.status == ReservationStatus.RESERVED


def test_replayed_reservation_key_returns_the_same_hold():
    first, _ = inventory_db.reserve(_lines(2), "guest-1", ttl_minutes=15, reservation_key="s-1:1")
    second, _ = inventory_db.reserve(_lines(2), "guest-1", ttl_minutes=15, reservation_key="s-1:1")

    assert second.ticket_id == first.ticket_id
    assert _available() == 23


def test_expired_holds_are_reaped():
    reservation, _ = inventory_db.reserve(_lines(4), "guest-1", ttl_minutes=15)

    reaped = inventory_db.reap_expired(now=datetime.now(timezone.utc) + timedelta(minutes=16))

    assert reaped == 1
    assert reservation.status == ReservationStatus.EXPIRED
    assert _available() == 25
    assert not inventory_db.commit(reservation.ticket_id)


def test_missing_shade_uses_the_first_shade():
    reservation, _ = inventory_db.reserve([LineItem(product_id="velvet-rose", quantity=1)], "guest-1", ttl_minutes=15)

    assert reservation.items[0].shade_id == "velvet-rose-01"


def test_unknown_product_is_a_failure_not_an_error():
    response = client.post("/api/inventory/reserve", json={
        "items": [{"product_id": "no-such-gloss", "quantity": 1}],
        "holder_id": "guest-1",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["failures"][0]["reason"] == "unknown_product"


def test_stock_lookup_over_http():
    inventory_db.reserve(_lines(5), "guest-1", ttl_minutes=15)

    response = client.get("/api/inventory/rouge-noir", params={"shade_id": "rouge-noir-01"})

    assert response.status_code == 200
    assert response.json() == {
        "product_id": "rouge-noir",
        "shade_id": "rouge-noir-01",
        "on_hand": 25,
        "reserved": 5,
        "available": 20,
    }
    assert client.get("/api/inventory/no-such-gloss").status_code == 404


def test_declined_card_and_refund_rules():
    intent = client.post("/api/payments/intents", json={"amount": 2800}).json()

    declined = client.post("/api/payments/confirm", json={
        "client_secret": intent["client_secret"],
        "payment_method": "pm_card_declined",
    }).json()
    assert declined["status"] == "declined"
    assert client.post("/api/payments/refund", json={"payment_intent_id": intent["id"]}).status_code == 400

    succeeded = client.post("/api/payments/confirm", json={
        "client_secret": intent["client_secret"],
        "payment_method": "pm_card_visa",
    }).json()
    assert succeeded["status"] == "succeeded"

    refund = client.post("/api/payments/refund", json={"payment_intent_id": intent["id"]}).json()
    assert refund["amount"] == 2800
    assert client.post(f"/api/payments/intents/{intent['id']}/cancel").status_code == 400
