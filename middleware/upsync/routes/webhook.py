"""
Up Webhook Endpoint

Handles incoming Up webhook deliveries: verifies the authenticity signature,
filters event types and synchronizes the referenced transaction to PocketSmith
before responding.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from upsync.dependencies import get_event_router, get_up_service
from upsync.handlers.event_router import EventRouter
from upsync.services.up_service import UpService
from upsync.utils.exceptions import UpException, UpSignatureException, ValidationException
from upsync.utils.logging_config import get_correlation_id, get_logger, set_up_event_id

logger = get_logger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])


@router.post("/up")
async def up_webhook(
    request: Request,
    up_service: UpService = Depends(get_up_service),
    event_router: EventRouter = Depends(get_event_router),
):
    """
    Up webhook endpoint.

    Returns 400 for an empty or malformed body, 401 when the signature does
    not match, 200 for ignored event types and after a successful sync.
    Failures while fetching from Up or writing to PocketSmith propagate to
    the application exception handler and answer 500 so Up redelivers.
    """
    correlation_id = get_correlation_id()

    try:
        payload, signature = await up_service.extract_webhook_data(request)
        event = up_service.verify_webhook_signature(payload, signature)

    except UpSignatureException:
        raise HTTPException(status_code=401, detail="Could not verify webhook")

    except (UpException, ValidationException) as e:
        logger.error(
            f"Rejected Up webhook: {e.message}",
            extra={"error": e.to_dict(), "correlation_id": correlation_id},
        )
        raise HTTPException(status_code=400, detail=e.message)

    set_up_event_id(event.event_id)
    logger.info(
        "Received Up webhook event",
        extra={
            "event_id": event.event_id,
            "event_type": event.event_type,
            "correlation_id": correlation_id,
        },
    )

    try:
        result = await event_router.route_event(event)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=e.message)

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "status": result["status"],
            "event_id": result["event_id"],
            "event_type": result["event_type"],
            "result": result.get("result"),
            "correlation_id": correlation_id,
        },
    )
