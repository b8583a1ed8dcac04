"""
Event Router

Routes Up webhook events to the transaction handler based on event type.

Only TRANSACTION_CREATED and TRANSACTION_DELETED are synchronized.
TRANSACTION_SETTLED, PING and unknown event types are acknowledged and
dropped without calling either API.
"""

from typing import Any, Awaitable, Callable, Dict, List

from upsync.handlers.transaction_handler import TransactionHandler
from upsync.models.up_events import UpEventType, UpTransaction, UpWebhookEvent
from upsync.services.up_service import UpService
from upsync.utils.exceptions import ValidationException
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_EVENT_TYPES = (
    UpEventType.TRANSACTION_CREATED.value,
    UpEventType.TRANSACTION_DELETED.value,
)


class EventRouter:
    """
    Routes Up webhook events to the appropriate handler.

    Attributes:
        up: Up service used to fetch the full transaction
        transactions: Handler performing the PocketSmith synchronization
    """

    def __init__(self, up_service: UpService, transaction_handler: TransactionHandler):
        self.up = up_service
        self.transactions = transaction_handler

    def _get_handler(
        self, event_type: str
    ) -> Callable[[UpTransaction], Awaitable[Dict[str, Any]]]:
        handlers = {
            UpEventType.TRANSACTION_CREATED.value: self.transactions.handle_transaction_created,
            UpEventType.TRANSACTION_DELETED.value: self.transactions.handle_transaction_deleted,
        }
        return handlers[event_type]

    @staticmethod
    def is_supported(event_type: str) -> bool:
        """Check if an event type is synchronized to PocketSmith"""
        return event_type in SUPPORTED_EVENT_TYPES

    async def route_event(self, event: UpWebhookEvent) -> Dict[str, Any]:
        """
        Route an Up webhook event.

        Processing flow:
        1. Classify the event type, ignoring anything not synchronized
        2. Fetch the full transaction from Up
        3. Hand the transaction to the create or delete handler

        Args:
            event: Verified Up webhook event

        Returns:
            Dictionary containing:
                - status (str): 'success' or 'ignored'
                - event_type (str): The event type received
                - event_id (str): The Up webhook event ID
                - result (dict, optional): Handler result if processed

        Raises:
            ValidationException: If a transaction event has no transaction
            BridgeException: If fetching or synchronizing fails
        """
        event_type = event.event_type
        event_id = event.event_id

        if not self.is_supported(event_type):
            logger.info(
                f"Ignoring Up event type: {event_type}",
                extra={"event_id": event_id, "event_type": event_type},
            )
            return {
                "status": "ignored",
                "event_type": event_type,
                "event_id": event_id,
            }

        transaction_id = event.transaction_id
        if not transaction_id:
            raise ValidationException(
                "Transaction event has no transaction relationship",
                details={"event_id": event_id, "event_type": event_type},
            )

        logger.info(
            f"Routing event: {event_type} ({event_id})",
            extra={
                "event_id": event_id,
                "event_type": event_type,
                "transaction_id": transaction_id,
            },
        )

        transaction = await self.up.get_transaction(transaction_id)

        handler = self._get_handler(event_type)
        result = await handler(transaction)

        logger.info(
            f"Event processed successfully: {event_type}",
            extra={
                "event_id": event_id,
                "handler": handler.__name__,
                "transaction_id": transaction_id,
            },
        )

        return {
            "status": "success",
            "event_type": event_type,
            "event_id": event_id,
            "handler": handler.__name__,
            "result": result,
        }


def get_supported_event_types() -> List[str]:
    """List of Up event types that are synchronized to PocketSmith."""
    return list(SUPPORTED_EVENT_TYPES)
