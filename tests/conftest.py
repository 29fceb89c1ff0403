from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import create_app
from app.observability.metrics import MetricsRegistry


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORT", "METRICS_PATH", "METRICS_ROUTE_LABEL", "METRICS_PROJECT_LABEL", "CORS_ALLOW_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def app() -> FastAPI:
    # Fresh stores and registry per test.
    return create_app()


@pytest.fixture
def metrics(app: FastAPI) -> MetricsRegistry:
    return app.state.context.metrics


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
