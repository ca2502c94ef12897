"""Application layer - listing loader, pricing contexts and collaborator ports."""

from variant_listing.application.contexts import ContextFanout
from variant_listing.application.listing_service import (
    ListingPrices,
    ProductListingVariationLoader,
    apply_currency_factor,
)
from variant_listing.application.ports import (
    AvailabilityRowSource,
    ContextFactory,
    IdentifierSelector,
    PriceRowSource,
)

__all__ = [
    # Contexts
    "ContextFanout",
    # Loader
    "ListingPrices",
    "ProductListingVariationLoader",
    "apply_currency_factor",
    # Ports
    "AvailabilityRowSource",
    "ContextFactory",
    "IdentifierSelector",
    "PriceRowSource",
]
