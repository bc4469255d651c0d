"""FastAPI server exposing weekly slot availability and slot booking.

Features:
- Basic auth validation with Authorization pass-through to upstream
- Error taxonomy rendered as {"message", "code"} bodies
- Request ID middleware with structured request logging
- Health check endpoint
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slot_proxy import __version__, config
from slot_proxy.api.dependencies import (
    get_gateway,
    get_slot_service,
    parse_anchor_date,
    require_basic_auth,
)
from slot_proxy.api.models import ErrorResponse, MessageResponse
from slot_proxy.errors import SlotProxyError
from slot_proxy.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging
from slot_proxy.models import BookingRequest, WeekResult
from slot_proxy.service import SlotService

setup_structured_logging(config.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    logger.info("server_starting", upstream=config.UPSTREAM_BASE_URL)

    yield

    if get_gateway.cache_info().currsize:
        get_gateway().session.close()
        get_gateway.cache_clear()
    logger.info("server_stopped")


app = FastAPI(
    title="Slot Proxy API",
    description="Weekly appointment slots and bookings over the upstream availability API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestIDMiddleware)


def _error(
    status_code: int,
    message: str,
    code: Optional[str] = None,
    headers: Optional[dict] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code).model_dump(),
        headers=headers
    )


@app.exception_handler(SlotProxyError)
async def slot_proxy_error_handler(request: Request, exc: SlotProxyError):
    """Render taxonomy errors with their own status code."""
    logger.warning("request_failed", code=exc.code, status=exc.status_code, message=exc.message)
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep framework HTTP errors in the same body shape."""
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors consistently."""
    logger.warning("validation_error", errors=str(exc.errors()))
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        str(exc.errors()),
        "VALIDATION_ERROR"
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error("unexpected_error", error=str(exc), exc_info=True)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred.",
        "UNEXPECTED_ERROR"
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "service": "slot-proxy",
        "version": __version__
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API info."""
    return {
        "message": "Slot Proxy API",
        "docs": "/docs",
        "health": "/health"
    }


@app.get(
    "/api/availability/{date}",
    tags=["Availability"],
    response_model=WeekResult,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get available slots for a given week"
)
def get_weekly_slots(
    date: str,
    authorization: str = Depends(require_basic_auth),
    service: SlotService = Depends(get_slot_service)
):
    """
    Available slots for the week anchored at `date` (format: yyyyMMdd, a Monday).

    Raises:
        400: Invalid date format or upstream rejected the anchor
        401: Missing/invalid credentials
        404: Upstream has no availability for the week
    """
    anchor_date = parse_anchor_date(date)
    return service.get_week_slots(anchor_date, authorization)


@app.post(
    "/api/bookings",
    tags=["Bookings"],
    response_model=MessageResponse,
    responses={400: {"model": MessageResponse}, 401: {"model": ErrorResponse}},
    summary="Take a slot"
)
def take_slot(
    booking: BookingRequest,
    authorization: str = Depends(require_basic_auth),
    service: SlotService = Depends(get_slot_service)
):
    """Reserve a slot with patient details."""
    if service.take_slot(booking, authorization):
        return MessageResponse(message="Slot taken successfully.")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=MessageResponse(message="Failed to take the slot.").model_dump()
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "slot_proxy.api_server:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower()
    )
