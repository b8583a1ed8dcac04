"""
Up Service

Handles Up webhook authenticity verification and transaction retrieval
from the Up REST API.
"""

import hashlib
import hmac
import json
from typing import Any, Dict, Optional, Tuple

import httpx
from fastapi import Request
from pydantic import ValidationError

from upsync.config import Settings
from upsync.models.up_events import UpTransaction, UpTransactionResponse, UpWebhookEvent
from upsync.utils.exceptions import (
    UpAPIException,
    UpException,
    UpSignatureException,
    ValidationException,
)
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)


def compute_signature(payload: bytes, secret: str) -> str:
    """Hex-encoded HMAC-SHA256 of the raw payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class UpService:
    """Up webhook and API service"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_secret = settings.up_secret_key or ""
        self.bearer_token = settings.up_bearer_token or ""
        self.base_url = settings.up_api_base_url.rstrip("/")
        self.signature_header = settings.up_signature_header
        self.timeout = settings.http_timeout_seconds
        self._transport = transport

    def _get_http_client(self) -> httpx.AsyncClient:
        # A fresh client per request avoids reusing a closed event loop in Lambda
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.bearer_token}",
            "Accept": "application/json",
        }

    async def extract_webhook_data(self, request: Request) -> Tuple[bytes, Optional[str]]:
        """
        Extract raw webhook payload and signature from request.

        Args:
            request: FastAPI request object

        Returns:
            Tuple of (payload bytes, signature header or None)

        Raises:
            UpException: If the body is missing
        """
        payload = await request.body()

        if not payload:
            raise UpException(
                "Empty request body",
                error_code="UP_EMPTY_BODY",
                details={"body": "empty"},
            )

        return payload, request.headers.get(self.signature_header)

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: Optional[str],
    ) -> UpWebhookEvent:
        """
        Verify the Up authenticity signature and parse the event.

        The HMAC is computed over the raw body exactly as received, before any
        JSON parsing.

        Args:
            payload: Raw request body as bytes
            signature: X-Up-Authenticity-Signature header value

        Returns:
            Validated UpWebhookEvent

        Raises:
            UpSignatureException: If signature verification fails
            ValidationException: If the verified body is not a webhook event
        """
        expected = compute_signature(payload, self.webhook_secret).encode("ascii")
        # Headers arrive latin-1 decoded; compare_digest rejects non-ASCII str
        provided = (signature or "").strip().encode("latin-1", "replace")

        if not provided or not hmac.compare_digest(expected, provided):
            logger.error(
                "Up webhook signature verification failed",
                extra={"signature_present": bool(signature)},
            )
            raise UpSignatureException()

        try:
            event = UpWebhookEvent.model_validate(json.loads(payload))
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid webhook payload: {e}")
            raise ValidationException(
                "Invalid webhook payload",
                details={"error": str(e)},
            ) from e

        logger.info(
            "Webhook signature verified successfully",
            extra={"event_id": event.event_id, "event_type": event.event_type},
        )

        return event

    async def _request(self, method: str, endpoint: str) -> Any:
        """
        Make an authenticated request to the Up API.

        Raises:
            UpAPIException: On network errors or non-2xx responses
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        async with self._get_http_client() as client:
            try:
                response = await client.request(
                    method=method, url=url, headers=self._get_headers()
                )
            except httpx.RequestError as e:
                logger.error(f"Network error calling Up API: {e}")
                raise UpAPIException(
                    f"Network error: {e}",
                    details={"error": str(e), "endpoint": endpoint},
                ) from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"message": response.text}

            logger.error(
                f"Up API error: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "endpoint": endpoint,
                    "error": error_data,
                },
            )
            raise UpAPIException(
                f"Up API error: {error_data}",
                status_code=response.status_code,
                details={"error": error_data, "endpoint": endpoint},
            )

        return response.json()

    async def get_transaction(self, transaction_id: str) -> UpTransaction:
        """
        Retrieve a transaction from the Up API.

        Args:
            transaction_id: Up transaction ID

        Returns:
            Transaction resource

        Raises:
            UpAPIException: If retrieval fails or the response is malformed
        """
        data = await self._request("GET", f"transactions/{transaction_id}")

        try:
            transaction = UpTransactionResponse.model_validate(data).data
        except ValidationError as e:
            raise UpAPIException(
                "Unexpected transaction payload from Up",
                details={"transaction_id": transaction_id, "error": str(e)},
            ) from e

        logger.info(
            "Retrieved transaction from Up",
            extra={
                "transaction_id": transaction_id,
                "status": transaction.attributes.status,
            },
        )
        return transaction

    async def ping(self) -> Dict[str, Any]:
        """Check the Up API is reachable and the token is accepted"""
        return await self._request("GET", "util/ping")
