"""Shared pytest fixtures for checkout tests."""

import httpx
import pytest

from checkout_service.core.config import Settings
from checkout_service.services.orchestrator import build_orchestrator
from mock_commerce.database import reset_all
from mock_commerce.main import app as mock_app

BACKEND_URL = "http://localhost:8001"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_backend():
    """Every test starts from catalog stock with no reservations or payments"""
    reset_all()
    yield
    reset_all()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        inventory_base_url=BACKEND_URL,
        payments_base_url=BACKEND_URL,
        shipping_base_url=BACKEND_URL,
        analytics_base_url=BACKEND_URL,
        loyalty_base_url=BACKEND_URL,
        http_timeout_seconds=5.0,
    )


@pytest.fixture
async def backend_client(anyio_backend):
    """HTTP client wired to the mock backend in-process"""
    transport = httpx.ASGITransport(app=mock_app)
    async with httpx.AsyncClient(transport=transport, base_url=BACKEND_URL) as client:
        yield client


@pytest.fixture
async def orchestrator(anyio_backend, settings, backend_client):
    checkout = build_orchestrator(settings, http_client=backend_client)
    yield checkout
    await checkout.close()
