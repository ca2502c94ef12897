"""API layer - FastAPI routers, schemas and middleware."""

from variant_listing.api.catalog import router as catalog_router
from variant_listing.api.health import router as health_router
from variant_listing.api.listing import router as listing_router

__all__ = [
    "catalog_router",
    "health_router",
    "listing_router",
]
