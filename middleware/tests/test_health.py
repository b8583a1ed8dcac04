"""
Tests for the health endpoints
"""

import pytest

from conftest import POCKETSMITH_API, UP_API


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_liveness(async_client):
    response = await async_client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness_all_healthy(async_client, outbound):
    outbound.add("GET", f"{UP_API}/util/ping", json={"meta": {"statusEmoji": "⚡️"}})
    outbound.add("GET", f"{POCKETSMITH_API}/me", json={"id": 5, "login": "tester"})

    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["dependencies"]["account_mappings"]["mapped_accounts"] == 2


@pytest.mark.asyncio
async def test_readiness_fails_when_up_rejects_token(async_client, outbound):
    outbound.add("GET", f"{UP_API}/util/ping", status_code=401, json={"errors": []})
    outbound.add("GET", f"{POCKETSMITH_API}/me", json={"id": 5})

    response = await async_client.get("/health/ready")

    assert response.status_code == 503
    dependencies = response.json()["dependencies"]
    assert dependencies["up_api"]["status"] == "unhealthy"
    assert dependencies["pocketsmith_api"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_readiness_fails_without_account_mappings(async_client, outbound, test_settings):
    test_settings.account_mappings = {}
    outbound.add("GET", f"{UP_API}/util/ping", json={"meta": {}})
    outbound.add("GET", f"{POCKETSMITH_API}/me", json={"id": 5})

    response = await async_client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["dependencies"]["account_mappings"]["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_root_lists_supported_events(async_client):
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json()["supported_events"] == [
        "TRANSACTION_CREATED",
        "TRANSACTION_DELETED",
    ]
