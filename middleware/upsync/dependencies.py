"""
FastAPI Dependencies

Builds the per-request services from an explicitly injected Settings object.
Nothing here is shared between invocations except the cached settings.
"""

from typing import Optional

import httpx
from fastapi import Depends

from upsync.config import Settings, get_settings
from upsync.handlers.event_router import EventRouter
from upsync.handlers.transaction_handler import TransactionHandler
from upsync.services.account_resolver import AccountResolver
from upsync.services.pocketsmith_service import PocketSmithService
from upsync.services.up_service import UpService


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport override; None uses httpx's default network transport."""
    return None


def get_up_service(
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> UpService:
    return UpService(settings, transport=transport)


def get_pocketsmith_service(
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> PocketSmithService:
    return PocketSmithService(settings, transport=transport)


def get_event_router(
    settings: Settings = Depends(get_settings),
    up_service: UpService = Depends(get_up_service),
    pocketsmith_service: PocketSmithService = Depends(get_pocketsmith_service),
) -> EventRouter:
    """Wire the router with a resolver built from this request's settings"""
    transaction_handler = TransactionHandler(
        pocketsmith_service, AccountResolver.from_settings(settings)
    )
    return EventRouter(up_service, transaction_handler)
