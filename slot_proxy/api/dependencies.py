"""FastAPI dependency injection functions."""
import base64
import binascii
from datetime import date, datetime
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from slot_proxy import config
from slot_proxy.availability import AvailabilityTransformer
from slot_proxy.gateway import UpstreamGateway
from slot_proxy.service import SlotService

INVALID_DATE_MESSAGE = "Invalid date format. Please use yyyyMMdd."


@lru_cache(maxsize=1)
def get_gateway() -> UpstreamGateway:
    """
    Get upstream gateway (cached singleton).

    Pattern: One pooled HTTP session shared across requests.
    """
    return UpstreamGateway(
        base_url=config.UPSTREAM_BASE_URL,
        timeout=config.UPSTREAM_TIMEOUT,
        max_attempts=config.UPSTREAM_MAX_ATTEMPTS
    )


def get_slot_service(gateway: UpstreamGateway = Depends(get_gateway)) -> SlotService:
    """Per-request slot service; holds no state of its own."""
    return SlotService(gateway, AvailabilityTransformer(day_offset=config.DAY_OFFSET))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"}
    )


async def require_basic_auth(
    authorization: Optional[str] = Header(None, description="Basic credentials")
) -> str:
    """
    FastAPI dependency for inbound Basic authentication.

    Only checks that the header is well-formed Basic credentials; the
    upstream API is the one that accepts or rejects them.

    Returns:
        The Authorization header unchanged, for forwarding upstream

    Raises:
        HTTPException 401: If the header is missing or malformed
    """
    if not authorization or not authorization[:6].lower() == "basic ":
        raise _unauthorized("No Authorization header or not Basic")

    encoded = authorization[6:].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise _unauthorized("Invalid Base64 Authorization header")

    if ":" not in decoded:
        raise _unauthorized("Invalid Basic credentials format")

    return authorization


def parse_anchor_date(value: str) -> date:
    """
    Parse a yyyyMMdd path segment.

    Raises:
        HTTPException 400: If the value is not an 8-digit valid date
    """
    if len(value) != 8 or not value.isdigit():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_DATE_MESSAGE)
    try:
        return datetime.strptime(value, config.API_DATE_FORMAT).date()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_DATE_MESSAGE)
