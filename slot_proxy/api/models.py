"""Pydantic models for API responses that are not domain models."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """Plain outcome message."""
    message: str = Field(..., description="Outcome message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"message": "Slot taken successfully."}
        }
    )


class ErrorResponse(BaseModel):
    """Error response schema."""
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Error code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Datetime must be a Monday.",
                "code": "WEEK_ANCHOR_NOT_MONDAY"
            }
        }
    )
