"""API package initialization."""
from slot_proxy.api.models import ErrorResponse, MessageResponse

__all__ = ["ErrorResponse", "MessageResponse"]
