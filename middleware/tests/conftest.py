"""
Pytest Configuration and Fixtures

Provides common fixtures and test utilities for bridge tests.
"""

import json
import hmac
import hashlib
import os
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

# Required settings must exist before the application module is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UP_SECRET_KEY", "up_test_webhook_secret")
os.environ.setdefault("UP_BEARER_TOKEN", "up:yeah:test-token")
os.environ.setdefault("POCKETSMITH_API_KEY", "ps_test_developer_key")
os.environ.setdefault("ACCOUNT_MAPPINGS", "{}")

from upsync.config import Settings, get_settings  # noqa: E402
from upsync.dependencies import get_http_transport  # noqa: E402
from upsync.main import app  # noqa: E402


TEST_WEBHOOK_SECRET = "up_test_webhook_secret"
UP_ACCOUNT_ID = "up-acc-spending"
UP_SAVER_ACCOUNT_ID = "up-acc-saver"
POCKETSMITH_ACCOUNT_ID = "1001"
POCKETSMITH_SAVER_ACCOUNT_ID = "1002"
TRANSACTION_ID = "7a1c9a4e-2f5b-4d1e-9c55-3a9b2f0d1e77"

UP_API = "https://api.up.com.au/api/v1"
POCKETSMITH_API = "https://api.pocketsmith.com/v2"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class OutboundRecorder:
    """
    Stand-in for the outside world.

    Records every outbound request made through an httpx.MockTransport and
    answers with the response registered for (method, path).
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Route] = {}

    def add(
        self,
        method: str,
        url: str,
        status_code: int = 200,
        json: Any = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        path = httpx.URL(url).path
        self._routes[(method.upper(), path)] = handler or httpx.Response(
            status_code, json=json
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "no route mocked"})
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path_contains: str = "") -> List[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and path_contains in request.url.path
        ]


def sign(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Compute the X-Up-Authenticity-Signature value for a body"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def make_webhook_event(
    event_type: str = "TRANSACTION_CREATED",
    transaction_id: Optional[str] = TRANSACTION_ID,
) -> Dict[str, Any]:
    """Up webhook event body"""
    relationships: Dict[str, Any] = {
        "webhook": {
            "data": {"type": "webhooks", "id": "wh-test-1"},
            "links": {"related": f"{UP_API}/webhooks/wh-test-1"},
        }
    }
    if transaction_id:
        relationships["transaction"] = {
            "data": {"type": "transactions", "id": transaction_id},
            "links": {"related": f"{UP_API}/transactions/{transaction_id}"},
        }

    return {
        "data": {
            "type": "webhook-events",
            "id": "evt-test-1",
            "attributes": {
                "eventType": event_type,
                "createdAt": "2024-03-01T08:15:02+11:00",
            },
            "relationships": relationships,
        }
    }


def make_up_transaction(
    transaction_id: str = TRANSACTION_ID,
    account_id: str = UP_ACCOUNT_ID,
    value_in_base_units: int = -450,
    description: str = "Coffee Shop",
    raw_text: Optional[str] = "COFFEE SHOP SYDNEY",
    message: Optional[str] = "Flat white",
    round_up_base_units: Optional[int] = None,
) -> Dict[str, Any]:
    """Up transaction resource as returned by GET /transactions/{id}"""
    round_up = None
    if round_up_base_units is not None:
        round_up = {
            "amount": {
                "currencyCode": "AUD",
                "value": f"{round_up_base_units / 100:.2f}",
                "valueInBaseUnits": round_up_base_units,
            },
            "boostPortion": None,
        }

    return {
        "type": "transactions",
        "id": transaction_id,
        "attributes": {
            "status": "HELD",
            "rawText": raw_text,
            "description": description,
            "message": message,
            "isCategorizable": True,
            "holdInfo": None,
            "roundUp": round_up,
            "cashback": None,
            "amount": {
                "currencyCode": "AUD",
                "value": f"{value_in_base_units / 100:.2f}",
                "valueInBaseUnits": value_in_base_units,
            },
            "foreignAmount": None,
            "settledAt": None,
            "createdAt": "2024-03-01T08:15:00+11:00",
        },
        "relationships": {
            "account": {
                "data": {"type": "accounts", "id": account_id},
                "links": {"related": f"{UP_API}/accounts/{account_id}"},
            },
            "category": {"data": None},
            "parentCategory": {"data": None},
            "tags": {"data": []},
        },
    }


@pytest.fixture
def test_settings() -> Settings:
    """Settings injected into the app instead of the process environment"""
    return Settings(
        environment="test",
        up_secret_key=TEST_WEBHOOK_SECRET,
        up_bearer_token="up:yeah:test-token",
        pocketsmith_api_key="ps_test_developer_key",
        account_mappings=json.dumps(
            {
                UP_ACCOUNT_ID: POCKETSMITH_ACCOUNT_ID,
                UP_SAVER_ACCOUNT_ID: POCKETSMITH_SAVER_ACCOUNT_ID,
            }
        ),
        log_level="DEBUG",
    )


@pytest.fixture
def outbound() -> OutboundRecorder:
    return OutboundRecorder()


@pytest.fixture
async def async_client(test_settings, outbound):
    """Async HTTP client wired to the app with settings and transport overridden"""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_transport] = lambda: outbound.transport

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def post_webhook(async_client):
    """Factory posting a webhook body with a valid signature by default"""

    async def _post(
        body: Union[Dict[str, Any], bytes],
        signature: Optional[str] = None,
        sign_body: bool = True,
    ) -> httpx.Response:
        payload = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers["X-Up-Authenticity-Signature"] = signature
        elif sign_body:
            headers["X-Up-Authenticity-Signature"] = sign(payload)
        return await async_client.post("/webhook/up", content=payload, headers=headers)

    return _post
