"""
Standardized API response models and utilities.
Provides consistent response formatting across all endpoints.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field
from fastapi import status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from domain.schemas.result_schemas import FieldError, ServiceFailure


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    environment: Optional[str] = Field(None, description="Deployment environment")
    timestamp: datetime = Field(
        default_factory=_utcnow, description="Check timestamp"
    )


class ServiceErrorResponse(BaseModel):
    """Body returned when a preference operation reports a failure"""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Summary message")
    details: List[FieldError] = Field(..., description="Field-level errors")


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": _utcnow(),
    }


def failure_response(
    result: ServiceFailure,
    error: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    """Render a service failure as ``{"success": false, "error", "details"}``"""
    body = ServiceErrorResponse(error=error, details=result.errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
