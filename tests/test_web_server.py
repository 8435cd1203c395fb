"""Tests for the health and metrics endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from web import create_app


@pytest.mark.asyncio
async def test_health_ok(store, transport):
    async with TestClient(TestServer(create_app(store, transport))) as client:
        response = await client.get("/health")
        body = await response.json()

    assert response.status == 200
    assert body["status"] == "ok"
    assert body["checks"] == {"database": "ok", "transport": "ok"}
    assert "memory_rss" in body["host"]


@pytest.mark.asyncio
async def test_health_without_transport(store):
    async with TestClient(TestServer(create_app(store))) as client:
        body = await (await client.get("/health")).json()

    assert body["checks"]["transport"] == "not_configured"


@pytest.mark.asyncio
async def test_health_degraded_when_database_fails():
    store = MagicMock()
    store.ping = AsyncMock(side_effect=RuntimeError("unable to open database file"))

    async with TestClient(TestServer(create_app(store))) as client:
        response = await client.get("/health")
        body = await response.json()

    assert response.status == 503
    assert body["status"] == "degraded"
    assert body["checks"]["database"] == "error"


@pytest.mark.asyncio
async def test_metrics_exposition(store, make_entry):
    await store.add(make_entry())

    async with TestClient(TestServer(create_app(store))) as client:
        response = await client.get("/metrics")
        text = await response.text()

    assert response.status == 200
    assert "bot_commands_total" in text
    assert "bot_entries_active" in text
    assert 'bot_database_operations_total{operation="add",status="success"}' in text
