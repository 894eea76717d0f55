"""Health check route"""

from fastapi import APIRouter
import logging

from api.responses import HealthResponse
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("newsplatform.api.health")


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Basic health check endpoint"""
    return HealthResponse(
        status="OK",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
    )
