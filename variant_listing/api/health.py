"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from variant_listing.infrastructure.catalog_store import get_catalog_store
from variant_listing.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness response schema."""

    status: str
    variant_count: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="variant-listing",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Returns:
        Readiness status with the size of the loaded catalog.
    """
    return ReadinessResponse(
        status="ready",
        variant_count=len(get_catalog_store().snapshot.variants),
    )
