"""Listing endpoints.

Runs the product listing variation loader against the loaded catalog.
The loader is CPU bound, so the handlers are plain functions and FastAPI
runs them in its threadpool instead of on the event loop.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from variant_listing.api.catalog import group_from_schema
from variant_listing.api.schemas import (
    AvailabilityResponse,
    ErrorResponse,
    ListingPricesRequest,
    ListingPricesResponse,
    ListingRequest,
    VisibilityRequest,
    VisibilityResponse,
)
from variant_listing.application.listing_service import ProductListingVariationLoader
from variant_listing.domain.value_objects import ListProduct, OptionGroup, VariantFacet
from variant_listing.infrastructure.catalog_store import (
    InMemoryCatalogStore,
    get_catalog_store,
)

router = APIRouter(prefix="/listing", tags=["Listing"])

ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Unauthorized"},
    404: {"model": ErrorResponse, "description": "Unknown reference"},
    422: {"model": ErrorResponse, "description": "Invalid configuration"},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_store() -> InMemoryCatalogStore:
    """Get the catalog store."""
    return get_catalog_store()


def get_loader(
    store: Annotated[InMemoryCatalogStore, Depends(get_store)],
) -> ProductListingVariationLoader:
    """Get a loader backed by the catalog store."""
    return ProductListingVariationLoader.from_store(store)


StoreDep = Annotated[InMemoryCatalogStore, Depends(get_store)]
LoaderDep = Annotated[ProductListingVariationLoader, Depends(get_loader)]


# ============================================================================
# Converters
# ============================================================================


def resolve_batch(
    store: InMemoryCatalogStore,
    request: ListingRequest,
) -> tuple[list[ListProduct], dict[str, list[OptionGroup]]]:
    """Resolve listed variants and their configurations.

    Configurations missing from the request are derived from the catalog.
    """
    products = [store.list_product(variant_id) for variant_id in request.variant_ids]

    if request.configurations is not None:
        configurations = {
            number: [group_from_schema(group) for group in groups]
            for number, groups in request.configurations.items()
        }
    else:
        configurations = {
            product.number: store.configuration_of(product.id) for product in products
        }

    return products, configurations


def facet_from_request(request: ListingRequest) -> VariantFacet | None:
    """Build the variant facet, None when the request carries none."""
    if request.expand_group_ids is None:
        return None
    return VariantFacet(expand_group_ids=frozenset(request.expand_group_ids))


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/prices",
    response_model=ListingPricesResponse,
    responses=ERROR_RESPONSES,
    summary="Cheapest prices per group subset",
)
def listing_prices(
    request: ListingPricesRequest,
    store: StoreDep,
    loader: LoaderDep,
) -> ListingPricesResponse:
    """Compute cheapest prices per customer group, currency and group subset."""
    shop = store.get_shop(request.shop_id)
    products, configurations = resolve_batch(store, request)
    prices = loader.get_listing_prices(
        shop, products, configurations, facet_from_request(request)
    )
    return ListingPricesResponse(prices=prices)


@router.post(
    "/availability",
    response_model=AvailabilityResponse,
    responses=ERROR_RESPONSES,
    summary="Availability per group subset",
)
def listing_availability(
    request: ListingRequest,
    store: StoreDep,
    loader: LoaderDep,
) -> AvailabilityResponse:
    """Compute availability per group subset."""
    products, configurations = resolve_batch(store, request)
    availability = loader.get_availability(
        products, configurations, facet_from_request(request)
    )
    return AvailabilityResponse(availability=availability)


@router.post(
    "/visibility",
    response_model=VisibilityResponse,
    responses=ERROR_RESPONSES,
    summary="Listing visibility of a variant",
)
def listing_visibility(
    request: VisibilityRequest,
    store: StoreDep,
    loader: LoaderDep,
) -> VisibilityResponse:
    """Compute for which expanded group subsets the variant is listed."""
    product = store.indexed_product(request.variant_id)
    facet = VariantFacet(expand_group_ids=frozenset(request.expand_group_ids))
    return VisibilityResponse(
        number=product.number,
        visibility=loader.get_visibility(product, facet),
    )
