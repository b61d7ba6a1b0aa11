"""Tests for the backend HTTP clients: error translation and response checks."""

import json
from decimal import Decimal

import httpx
import pytest

from checkout_service.core.errors import ContractViolationError, MalformedResponseError, ServiceUnavailableError
from checkout_service.models import PaymentIntentStatus
from checkout_service.services.analytics_client import AnalyticsClient
from checkout_service.services.inventory_client import InventoryClient
from checkout_service.services.payment_client import PaymentClient
from checkout_service.services.shipping_client import ShippingTaxClient

from support import oregon_address

BACKEND_URL = "http://localhost:8001"
LINES = [{"product_id": "ruby-velvet", "shade_id": "ruby-velvet-01", "quantity": 1}]


def _client(cls, handler, **kwargs):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return cls(BACKEND_URL, http_client=http_client, **kwargs), http_client


@pytest.mark.anyio
async def test_reserve_success_without_ticket_is_malformed():
    def handler(request):
        return httpx.Response(200, json={"success": True})

    inventory, http_client = _client(InventoryClient, handler)
    async with http_client:
        with pytest.raises(MalformedResponseError):
            await inventory.reserve(LINES, "guest-1", "key-1")


@pytest.mark.anyio
async def test_reserve_refusal_carries_the_failures():
    def handler(request):
        return httpx.Response(200, json={
            "success": False,
            "failures": [{"product_id": "ruby-velvet", "shade_id": "ruby-velvet-01", "requested": 1}],
        })

    inventory, http_client = _client(InventoryClient, handler)
    async with http_client:
        outcome = await inventory.reserve(LINES, "guest-1", "key-1")

    assert not outcome.success
    assert outcome.ticket is None
    assert outcome.failures[0].reason == "insufficient_stock"


@pytest.mark.anyio
async def test_non_json_body_is_malformed():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    inventory, http_client = _client(InventoryClient, handler)
    async with http_client:
        with pytest.raises(MalformedResponseError):
            await inventory.commit("res_1")


@pytest.mark.anyio
async def test_negative_tax_is_malformed():
    def handler(request):
        return httpx.Response(200, json={"tax": -120})

    shipping, http_client = _client(ShippingTaxClient, handler)
    async with http_client:
        with pytest.raises(MalformedResponseError):
            await shipping.calculate_tax(oregon_address(), Decimal("10.00"))


@pytest.mark.anyio
async def test_server_error_becomes_service_unavailable():
    def handler(request):
        return httpx.Response(503, text="upstream timeout")

    payments, http_client = _client(PaymentClient, handler)
    async with http_client:
        with pytest.raises(ServiceUnavailableError) as excinfo:
            await payments.confirm("pi_1_secret_x", "pm_card_visa")

    assert excinfo.value.details == {"service": "payments", "status_code": 503}
    assert "upstream timeout" not in excinfo.value.message


@pytest.mark.anyio
async def test_connection_error_becomes_service_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    inventory, http_client = _client(InventoryClient, handler)
    async with http_client:
        with pytest.raises(ServiceUnavailableError):
            await inventory.release(LINES, "guest-1", "payment_declined", ticket_id="res_1")


@pytest.mark.anyio
async def test_intent_amount_travels_in_cents():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={
            "id": "pi_1",
            "client_secret": "pi_1_secret_x",
            "amount": seen["amount"],
            "currency": seen["currency"],
            "status": "requires_confirmation",
        })

    payments, http_client = _client(PaymentClient, handler)
    async with http_client:
        intent = await payments.create_intent(Decimal("85.80"), "USD", {"customer_email": "ada@example.com"})

    assert seen["amount"] == 8580
    assert seen["currency"] == "usd"
    assert intent.amount == Decimal("85.80")
    assert intent.currency == "USD"
    assert intent.status == PaymentIntentStatus.REQUIRES_CONFIRMATION


@pytest.mark.anyio
async def test_analytics_failures_are_swallowed():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        raise httpx.ConnectError("collector down", request=request)

    analytics, http_client = _client(AnalyticsClient, handler)
    async with http_client:
        analytics.track("checkout_step", {"session_id": "s-1"})
        await analytics.drain()

    assert calls == ["/api/analytics/events"]


@pytest.mark.anyio
async def test_disabled_analytics_sends_nothing():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"ok": True})

    analytics, http_client = _client(AnalyticsClient, handler, enabled=False)
    async with http_client:
        analytics.track("checkout_step", {"session_id": "s-1"})
        await analytics.drain()

    assert calls == []


@pytest.mark.anyio
async def test_availability_reflects_live_holds(backend_client):
    inventory = InventoryClient(BACKEND_URL, http_client=backend_client)
    await inventory.reserve(
        [{"product_id": "rouge-noir", "shade_id": "rouge-noir-01", "quantity": 2}],
        "guest-1",
        "key-1",
        ttl_minutes=15,
    )

    availability = await inventory.get_availability("rouge-noir", "rouge-noir-01")

    assert (availability.on_hand, availability.reserved, availability.available) == (25, 2, 23)
    with pytest.raises(ServiceUnavailableError) as excinfo:
        await inventory.get_availability("no-such-gloss")
    assert excinfo.value.details["status_code"] == 404


@pytest.mark.anyio
async def test_release_needs_a_ticket_or_reservation_key():
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(200, json={"ok": True})

    inventory, http_client = _client(InventoryClient, handler)
    async with http_client:
        with pytest.raises(ContractViolationError):
            await inventory.release(LINES, "user-1", "reservation_error")
    assert sent == []
