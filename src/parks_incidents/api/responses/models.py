"""
Error response models for the incidents API.

Successful calls return the resource itself (an incident, a list of comments,
...); failures share one envelope so clients can read a machine-readable code.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ResponseMetadata(BaseModel):
    """Correlation data attached to every error response."""

    request_id: str = Field(
        default_factory=lambda: f"req_{uuid4().hex[:12]}", description="Unique request identifier for tracking and correlation"
    )
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        description="Response timestamp in ISO 8601 format",
    )


class ErrorDetail(BaseModel):
    """
    Structured error detail information.

    ``error_code`` is what clients branch on, e.g. ``INVALID_TRANSITION``.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_code": "INVALID_TRANSITION",
                "error_type": "InvalidTransitionError",
                "field": None,
                "description": "Cannot start an incident that is resolved",
                "context": {"current_status": "resolved", "action": "start"},
            }
        }
    )

    error_code: str = Field(description="Machine-readable error code for programmatic handling")
    error_type: str = Field(description="Error category/type for classification")
    field: str | None = Field(None, description="Specific field that caused the error (if applicable)")
    description: str = Field(description="Human-readable error description")
    context: dict[str, Any] | None = Field(None, description="Additional machine-readable context")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing route."""

    status: ResponseStatus = Field(default=ResponseStatus.ERROR, description="Error status")
    message: str = Field(description="Human-readable status message")
    errors: list[ErrorDetail] = Field(default_factory=list, description="List of error details")
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @classmethod
    def create_error(
        cls,
        message: str,
        error_code: str,
        error_type: str,
        request_id: str | None = None,
        field: str | None = None,
        context: dict[str, Any] | None = None,
        extra_errors: list[ErrorDetail] | None = None,
    ) -> ErrorResponse:
        """Build an envelope whose first error carries ``error_code``."""
        metadata = ResponseMetadata(request_id=request_id) if request_id else ResponseMetadata()
        first = ErrorDetail(error_code=error_code, error_type=error_type, field=field, description=message, context=context or None)
        return cls(message=message, errors=[first, *(extra_errors or [])], metadata=metadata)
