"""
FastAPI Bridge Application

Main application entry point for the Up to PocketSmith webhook bridge.
Provides webhook verification, event filtering and ledger synchronization.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from upsync.config import get_settings
from upsync.handlers.event_router import get_supported_event_types
from upsync.routes import health, webhook
from upsync.utils.exceptions import BridgeException
from upsync.utils.logging_config import (
    clear_log_context,
    get_logger,
    set_correlation_id,
    setup_logging,
)

settings = get_settings()

setup_logging(
    log_level=settings.log_level,
    service=settings.app_name,
    version=settings.app_version,
)
logger = get_logger(__name__)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Mirrors Up transactions into PocketSmith",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests for tracing"""
    correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

    try:
        response = await call_next(request)
    finally:
        clear_log_context()

    response.headers["X-Correlation-ID"] = correlation_id

    return response


@app.exception_handler(BridgeException)
async def bridge_exception_handler(request: Request, exc: BridgeException):
    """Fetch and synchronization failures answer 500 so Up redelivers"""
    logger.error(
        f"Bridge exception: {exc.message}",
        extra={"error": exc.to_dict()},
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(
        f"Unexpected exception: {exc}",
        exc_info=exc,
        extra={"error": str(exc), "type": type(exc).__name__},
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        },
    )


app.include_router(webhook.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "supported_events": get_supported_event_types(),
        "docs_url": "/docs" if settings.is_development else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "upsync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
