"""Root conftest — shared settings, registry, dispatcher and HTTP client fixtures.

Invariants:
    - Every test gets its own app built from explicit Settings (no .env, no cache)
    - HTTP tests go through httpx ASGITransport: no sockets, no server process
"""

import pytest
from httpx import ASGITransport, AsyncClient

from rpc_starter.config import Settings
from rpc_starter.main import create_app
from rpc_starter.services.dispatcher import Dispatcher
from rpc_starter.services.router import build_registry


@pytest.fixture
def settings():
    return Settings(
        _env_file=None, environment="test", todos_latency_ms=1, log_format="text",
        timezone="UTC",
    )


@pytest.fixture
def registry(settings):
    return build_registry(settings)


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry, timeout_seconds=5)


@pytest.fixture
def test_app(settings):
    return create_app(settings)


@pytest.fixture
async def client(test_app):
    """FastAPI test client over the in-process ASGI app."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test",
    ) as c:
        yield c
