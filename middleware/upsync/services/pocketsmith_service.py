"""
PocketSmith REST API Service

Wrapper for the PocketSmith transaction endpoints used by the bridge, with
developer-key authentication and error handling.
"""

from typing import Any, Dict, List, Optional, Union

import httpx

from upsync.config import Settings
from upsync.models.pocketsmith_records import (
    PocketSmithTransaction,
    PocketSmithTransactionRecord,
)
from upsync.utils.exceptions import PocketSmithAPIException
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)


class PocketSmithService:
    """Service for interacting with the PocketSmith REST API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.pocketsmith_api_key or ""
        self.base_url = settings.pocketsmith_api_base_url.rstrip("/")
        self.exact_note_match = settings.pocketsmith_exact_note_match
        self.timeout = settings.http_timeout_seconds
        self._transport = transport

    def _get_http_client(self) -> httpx.AsyncClient:
        # A fresh client per request avoids reusing a closed event loop in Lambda
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "X-Developer-Key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make authenticated HTTP request to the PocketSmith API.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: API endpoint
            json_data: Optional JSON body
            params: Optional query parameters

        Returns:
            Decoded JSON response, or None for 204 No Content

        Raises:
            PocketSmithAPIException: If the request fails
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        async with self._get_http_client() as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    json=json_data,
                    params=params,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error calling PocketSmith API: {e}")
                raise PocketSmithAPIException(
                    f"Network error: {e}",
                    details={"error": str(e), "endpoint": endpoint},
                ) from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"message": response.text}

            logger.error(
                f"PocketSmith API error: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "endpoint": endpoint,
                    "error": error_data,
                },
            )

            raise PocketSmithAPIException(
                f"PocketSmith API error: {error_data}",
                status_code=response.status_code,
                details={"error": error_data, "endpoint": endpoint},
            )

        if response.status_code == 204 or not response.content:
            return None

        return response.json()

    async def create_transaction(
        self, account_id: str, transaction: PocketSmithTransaction
    ) -> Dict[str, Any]:
        """
        Create a transaction in a PocketSmith transaction account.

        Args:
            account_id: PocketSmith transaction account ID
            transaction: Transaction to create

        Returns:
            Created transaction as returned by PocketSmith
        """
        logger.info(
            "Creating PocketSmith transaction",
            extra={
                "account_id": account_id,
                "payee": transaction.payee,
                "note": transaction.note,
            },
        )

        response = await self._request(
            "POST",
            f"transaction_accounts/{account_id}/transactions",
            json_data=transaction.to_payload(),
        )

        logger.info(
            "PocketSmith transaction created",
            extra={
                "account_id": account_id,
                "pocketsmith_id": (response or {}).get("id"),
                "note": transaction.note,
            },
        )

        return response or {}

    async def find_transactions_by_note(
        self, account_id: str, note: str
    ) -> List[PocketSmithTransactionRecord]:
        """
        Find transactions carrying the given correlation note.

        Relies on PocketSmith's free-text search indexing the note field.
        With exact note matching enabled, results whose note differs are dropped.

        Args:
            account_id: PocketSmith account ID
            note: Correlation value (the Up transaction ID)

        Returns:
            Matching transactions
        """
        response = await self._request(
            "GET",
            f"accounts/{account_id}/transactions",
            params={"search": note},
        )

        records = [
            PocketSmithTransactionRecord.model_validate(item)
            for item in (response or [])
        ]

        if self.exact_note_match:
            records = [record for record in records if record.note == note]

        logger.info(
            f"Found {len(records)} PocketSmith transactions for note",
            extra={"account_id": account_id, "note": note, "count": len(records)},
        )

        return records

    async def delete_transaction(self, transaction_id: Union[int, str]) -> None:
        """Delete a PocketSmith transaction by its PocketSmith ID"""
        await self._request("DELETE", f"transactions/{transaction_id}")

        logger.info(
            "PocketSmith transaction deleted",
            extra={"pocketsmith_id": transaction_id},
        )

    async def get_current_user(self) -> Dict[str, Any]:
        """Fetch the authorised user, used as a connectivity check"""
        return await self._request("GET", "me")
