"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from ..dependencies import get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    record_store: str
    clients: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_container().settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports the configured record store and how many client applications
    can receive redirects.
    """
    settings = get_container().settings
    return ReadinessResponse(
        status="ready" if settings.valid_clients else "unconfigured",
        record_store=settings.record_store,
        clients=len(settings.valid_clients),
    )
