"""Variant listing API main application module.

This module initializes the FastAPI application and configures
logging, middleware, routers and exception handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from variant_listing.api.catalog import router as catalog_router
from variant_listing.api.health import router as health_router
from variant_listing.api.listing import router as listing_router
from variant_listing.api.middleware import setup_middleware
from variant_listing.domain.exceptions import (
    CatalogError,
    ConfigurationError,
    DomainError,
    UnknownReferenceError,
)
from variant_listing.infrastructure.config import settings
from variant_listing.infrastructure.logging_config import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    logger.info(
        "Starting variant listing API",
        version=settings.api_version,
        debug=settings.debug,
    )
    yield
    logger.info("Shutting down variant listing API")


app = FastAPI(
    title="Variant Listing API",
    description="Listing prices, availability and visibility of product variant combinations",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup custom middleware (request ID, API key auth, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router)
app.include_router(listing_router)


# ============================================================================
# Domain Exception Handlers
# ============================================================================


def _error_response(
    request: Request, status_code: int, error_code: str, exc: DomainError
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": [
                {"field": key, "message": str(value)} for key, value in exc.details.items()
            ],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Reject malformed catalog configuration."""
    logger.warning("Invalid catalog configuration", path=request.url.path, error=exc.message)
    return _error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_CONFIGURATION", exc
    )


@app.exception_handler(UnknownReferenceError)
async def unknown_reference_handler(request: Request, exc: UnknownReferenceError) -> JSONResponse:
    """Report references the catalog cannot resolve."""
    return _error_response(request, status.HTTP_404_NOT_FOUND, "UNKNOWN_REFERENCE", exc)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Report other catalog collaborator faults."""
    logger.error("Catalog error", path=request.url.path, error=exc.message)
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "CATALOG_ERROR", exc
    )
