"""Error taxonomy surfaced to inbound callers.

Every error carries a human-readable message, the HTTP status the API
layer answers with, and a stable machine code.
"""
from typing import Optional


class SlotProxyError(Exception):
    """Base class for all errors the API layer renders."""

    status_code = 500
    code = "UNEXPECTED_ERROR"
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(SlotProxyError):
    """Missing or rejected credentials."""
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized: Authentication failed."


class BadUpstreamRequest(SlotProxyError):
    """Upstream rejected the request as invalid."""
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad Request: The request was invalid."


class WeekAnchorNotMonday(BadUpstreamRequest):
    """Upstream only accepts week queries anchored on a Monday."""
    code = "WEEK_ANCHOR_NOT_MONDAY"
    default_message = "Datetime must be a Monday."


class UpstreamNotFound(SlotProxyError):
    status_code = 404
    code = "UPSTREAM_NOT_FOUND"
    default_message = "Not Found: The requested resource could not be found."


class UpstreamServerError(SlotProxyError):
    status_code = 500
    code = "UPSTREAM_SERVER_ERROR"
    default_message = "Internal Server Error: There was a problem with the server."


class MalformedUpstreamResponse(SlotProxyError):
    """Upstream body is not JSON or does not match the expected shape."""
    status_code = 502
    code = "MALFORMED_RESPONSE"
    default_message = "Invalid JSON response format."


class UnexpectedFailure(SlotProxyError):
    """Catch-all for anything the other members do not describe."""


class SlotsNotFound(SlotProxyError):
    """Upstream answered without a weekly availability document."""
    status_code = 404
    code = "SLOTS_NOT_FOUND"
    default_message = "No available slots found for the given week."
