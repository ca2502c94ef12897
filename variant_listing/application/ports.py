"""Collaborator interfaces of the listing loader.

Row fetching, shop resolution and context creation live outside the
engine. Any object with these methods can be plugged in; the in-memory
catalog store is the implementation shipped with the service.
"""

from typing import Protocol, Sequence

from variant_listing.domain.value_objects import AvailabilityRow, PriceRow, PricingContext


class PriceRowSource(Protocol):
    """Fetches price rows filtered by the pricing rules of a context."""

    def fetch_price_rows(
        self,
        product_ids: Sequence[int],
        variant_ids: Sequence[int],
        context: PricingContext,
    ) -> list[PriceRow]:
        """Fetch one row per (variant, option) of the given products.

        Rows are restricted to active variants passing the last-stock rule
        and to the unbounded quantity tier, with customer group fallback
        already applied.
        """
        ...


class AvailabilityRowSource(Protocol):
    """Fetches stock rows of active variants."""

    def fetch_availability_rows(self, variant_ids: Sequence[int]) -> list[AvailabilityRow]:
        """Fetch one row per (variant, option) of the products owning the variants."""
        ...


class IdentifierSelector(Protocol):
    """Resolves the identifiers a listing is computed for."""

    def get_shop_currency_ids(self, shop_id: int) -> list[int]:
        """Currencies of a shop."""
        ...

    def get_customer_group_keys(self) -> list[str]:
        """Keys of every customer group."""
        ...


class ContextFactory(Protocol):
    """Creates pricing contexts."""

    def create_shop_context(
        self,
        shop_id: int,
        currency_id: int,
        customer_group_key: str,
    ) -> PricingContext:
        """Create the pricing context for a shop, currency and customer group."""
        ...
