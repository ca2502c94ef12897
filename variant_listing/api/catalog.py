"""Catalog snapshot endpoints.

The listing endpoints compute against an in-memory catalog snapshot
uploaded here.
"""

import structlog
from fastapi import APIRouter, status

from variant_listing.api.schemas import (
    CatalogSnapshotRequest,
    CatalogSnapshotResponse,
    ErrorResponse,
    OptionGroupSchema,
)
from variant_listing.domain.exceptions import UnknownReferenceError
from variant_listing.domain.value_objects import Currency, CustomerGroup, OptionGroup, Shop
from variant_listing.infrastructure.catalog_store import (
    CatalogSnapshot,
    InMemoryCatalogStore,
    PriceEntry,
    VariantStock,
    set_catalog_store,
)
from variant_listing.infrastructure.config import settings

logger = structlog.get_logger()

router = APIRouter(prefix="/catalog", tags=["Catalog"])


# ============================================================================
# Converters
# ============================================================================


def group_from_schema(group: OptionGroupSchema) -> OptionGroup:
    """Convert group schema to OptionGroup value object."""
    return OptionGroup.of(group.id, group.options, name=group.name)


def snapshot_from_request(request: CatalogSnapshotRequest) -> CatalogSnapshot:
    """Convert snapshot request to CatalogSnapshot.

    Raises:
        UnknownReferenceError: If a shop references an unknown currency.
    """
    currencies = {
        currency.id: Currency(id=currency.id, factor=currency.factor, code=currency.code)
        for currency in request.currencies
    }

    shops = {}
    for shop in request.shops:
        currency = currencies.get(shop.currency_id)
        if currency is None:
            raise UnknownReferenceError("Currency", shop.currency_id)
        shops[shop.id] = Shop(
            id=shop.id,
            currency=currency,
            is_main=shop.is_main,
            parent_id=shop.parent_id,
        )

    return CatalogSnapshot(
        groups=[group_from_schema(group) for group in request.groups],
        variants=[
            VariantStock(
                id=variant.id,
                product_id=variant.product_id,
                number=variant.number,
                option_ids=tuple(variant.option_ids),
                active=variant.active,
                in_stock=variant.in_stock,
                min_purchase=variant.min_purchase,
                last_stock=variant.last_stock,
            )
            for variant in request.variants
        ],
        prices=[
            PriceEntry(
                variant_id=entry.variant_id,
                customer_group_key=entry.customer_group_key,
                price=entry.price,
                from_quantity=entry.from_quantity,
                to_quantity=entry.to_quantity,
            )
            for entry in request.prices
        ],
        shops=shops,
        shop_currencies={shop_id: list(ids) for shop_id, ids in request.shop_currencies.items()},
        currencies=currencies,
        customer_groups={
            group.key: CustomerGroup(id=group.id, key=group.key)
            for group in request.customer_groups
        },
        fallback_customer_group=(
            request.fallback_customer_group or settings.default_fallback_customer_group
        ),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.put(
    "/snapshot",
    response_model=CatalogSnapshotResponse,
    status_code=status.HTTP_200_OK,
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Unknown reference"},
        422: {"model": ErrorResponse, "description": "Invalid configuration"},
    },
    summary="Replace the catalog snapshot",
)
async def put_snapshot(request: CatalogSnapshotRequest) -> CatalogSnapshotResponse:
    """Replace the in-memory catalog the listing endpoints compute against."""
    snapshot = snapshot_from_request(request)
    set_catalog_store(InMemoryCatalogStore(snapshot))

    logger.info(
        "Catalog snapshot loaded",
        group_count=len(snapshot.groups),
        variant_count=len(snapshot.variants),
        price_count=len(snapshot.prices),
        shop_count=len(snapshot.shops),
    )

    return CatalogSnapshotResponse(
        group_count=len(snapshot.groups),
        variant_count=len(snapshot.variants),
        price_count=len(snapshot.prices),
        shop_count=len(snapshot.shops),
    )
