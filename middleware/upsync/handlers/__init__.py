"""Event handlers for Up webhook events"""

from upsync.handlers.event_router import EventRouter
from upsync.handlers.transaction_handler import TransactionHandler

__all__ = [
    "EventRouter",
    "TransactionHandler",
]
