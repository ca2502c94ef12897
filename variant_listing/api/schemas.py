"""API schemas for the variant listing service.

Pydantic models for request/response validation and serialization.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class OptionGroupSchema(BaseModel):
    """Configurator group with option ids in declared order."""

    id: int = Field(..., description="Group ID")
    options: list[int] = Field(default_factory=list, description="Option IDs, first is the baseline")
    name: str | None = Field(default=None, description="Display name")


# ============================================================================
# Catalog Snapshot Schemas
# ============================================================================


class CurrencySchema(BaseModel):
    """Shop currency."""

    id: int
    factor: Decimal = Field(default=Decimal("1"), gt=0, description="Conversion factor")
    code: str | None = Field(default=None, description="ISO 4217 code")


class ShopSchema(BaseModel):
    """Shop with its default currency."""

    id: int
    currency_id: int
    is_main: bool = True
    parent_id: int | None = None


class CustomerGroupSchema(BaseModel):
    """Customer group."""

    id: int
    key: str = Field(..., min_length=1)


class VariantSchema(BaseModel):
    """Variant with stock data."""

    id: int
    product_id: int
    number: str
    option_ids: list[int]
    active: bool = True
    in_stock: int = 0
    min_purchase: int = 1
    last_stock: bool = False


class PriceEntrySchema(BaseModel):
    """Graduated price of a variant."""

    variant_id: int
    customer_group_key: str
    price: Decimal = Field(..., ge=0)
    from_quantity: int = 1
    to_quantity: int | None = Field(default=None, description="None for the unbounded tier")


class CatalogSnapshotRequest(BaseModel):
    """Full catalog snapshot replacing the current one."""

    groups: list[OptionGroupSchema] = Field(default_factory=list)
    variants: list[VariantSchema] = Field(default_factory=list)
    prices: list[PriceEntrySchema] = Field(default_factory=list)
    shops: list[ShopSchema] = Field(default_factory=list)
    shop_currencies: dict[int, list[int]] = Field(
        default_factory=dict, description="Currency IDs per main shop"
    )
    currencies: list[CurrencySchema] = Field(default_factory=list)
    customer_groups: list[CustomerGroupSchema] = Field(default_factory=list)
    fallback_customer_group: str | None = Field(
        default=None, description="Defaults to the configured fallback group"
    )


class CatalogSnapshotResponse(BaseModel):
    """Summary of the loaded snapshot."""

    group_count: int
    variant_count: int
    price_count: int
    shop_count: int


# ============================================================================
# Listing Schemas
# ============================================================================


class ListingRequest(BaseModel):
    """Batch of listed variants."""

    variant_ids: list[int] = Field(..., min_length=1, description="Listed variant IDs")
    expand_group_ids: list[int] | None = Field(
        default=None, description="Groups expanded by the variant facet, None without facet"
    )
    configurations: dict[str, list[OptionGroupSchema]] | None = Field(
        default=None,
        description="Groups per product number, derived from the catalog when omitted",
    )


class ListingPricesRequest(ListingRequest):
    """Batch of listed variants priced for a shop."""

    shop_id: int


class ListingPricesResponse(BaseModel):
    """Cheapest prices per product number, context and group subset."""

    prices: dict[str, dict[str, dict[str, Decimal]]]


class AvailabilityResponse(BaseModel):
    """Availability per product number and group subset."""

    availability: dict[str, dict[str, bool]]


class VisibilityRequest(BaseModel):
    """Variant whose listing visibility is computed."""

    variant_id: int
    expand_group_ids: list[int] = Field(default_factory=list)


class VisibilityResponse(BaseModel):
    """Visibility per expanded group subset."""

    number: str
    visibility: dict[str, bool]
