"""Product listing variation application service.

Computes, per product batch, the listing prices and availability of every
group subset and the facet visibility of a single variant.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

import structlog

from variant_listing.application.contexts import ContextFanout
from variant_listing.application.ports import (
    AvailabilityRowSource,
    ContextFactory,
    IdentifierSelector,
    PriceRowSource,
)
from variant_listing.catalog.aggregator import CombinationAggregator, render_keys
from variant_listing.catalog.combinations import group_subsets
from variant_listing.catalog.indexes import build_availability_index, build_price_index
from variant_listing.catalog.visibility import VisibilitySplitter
from variant_listing.domain.value_objects import (
    GroupSubset,
    IndexedProduct,
    ListProduct,
    OptionGroup,
    PricingContext,
    Shop,
    VariantFacet,
)
from variant_listing.infrastructure.config import settings

logger = structlog.get_logger()

Configurations = Mapping[str, Sequence[OptionGroup]]

# number -> "<customer group>_<currency id>" -> subset key -> price
ListingPrices = dict[str, dict[str, dict[str, Decimal]]]

_FROM_SETTINGS = object()


def apply_currency_factor(
    price: Decimal,
    factor: Decimal,
    decimal_places: int | None = None,
) -> Decimal:
    """Convert a base-currency price.

    Args:
        price: Price in the base currency.
        factor: Currency factor.
        decimal_places: Quantize to this many places with ROUND_HALF_UP,
            None keeps the raw product.

    Returns:
        Converted price.
    """
    converted = price * factor
    if decimal_places is None:
        return converted
    return converted.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def _expand_group_ids(facet: VariantFacet | None) -> frozenset[int]:
    return facet.expand_group_ids if facet is not None else frozenset()


class ProductListingVariationLoader:
    """Loads per-subset listing data for a batch of configurable products.

    Example usage:
        store = InMemoryCatalogStore(snapshot)
        loader = ProductListingVariationLoader.from_store(store)

        prices = loader.get_listing_prices(shop, products, configurations)
        prices["SW10001"]["EK_1"]["g10"]  # cheapest price listing by group 10
    """

    def __init__(
        self,
        price_source: PriceRowSource,
        availability_source: AvailabilityRowSource,
        identifier_selector: IdentifierSelector,
        context_factory: ContextFactory,
        aggregator: CombinationAggregator | None = None,
        splitter: VisibilitySplitter | None = None,
        price_decimal_places: int | None | object = _FROM_SETTINGS,
    ) -> None:
        """Initialize loader with its collaborators.

        Args:
            price_source: Fetches price rows per pricing context.
            availability_source: Fetches availability rows.
            identifier_selector: Resolves currencies and customer groups.
            context_factory: Creates pricing contexts.
            aggregator: Combination aggregator.
            splitter: Visibility splitter.
            price_decimal_places: Rounding of converted prices, None keeps
                raw products. Defaults to ``settings.price_decimal_places``.
        """
        self.price_source = price_source
        self.availability_source = availability_source
        self.contexts = ContextFanout(identifier_selector, context_factory)
        self.aggregator = aggregator or CombinationAggregator()
        self.splitter = splitter or VisibilitySplitter()
        if price_decimal_places is _FROM_SETTINGS:
            price_decimal_places = settings.price_decimal_places
        self.price_decimal_places: int | None = price_decimal_places  # type: ignore[assignment]

    @classmethod
    def from_store(cls, store: object, **kwargs: object) -> "ProductListingVariationLoader":
        """Create a loader whose collaborators are all the same store."""
        return cls(store, store, store, store, **kwargs)  # type: ignore[arg-type]

    # ------------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------------

    def get_listing_prices(
        self,
        shop: Shop,
        products: Sequence[ListProduct],
        configurations: Configurations,
        facet: VariantFacet | None = None,
    ) -> ListingPrices:
        """Compute the cheapest price per group subset.

        Prices are aggregated once per customer group in the shop currency
        and then converted into every currency of the shop.

        Args:
            shop: Shop the listing belongs to.
            products: Product batch.
            configurations: Groups per product number.
            facet: Optional variant facet.

        Returns:
            Prices keyed by product number, then by
            ``<customer group key>_<currency id>``, then by subset key.
            Products without configuration or prices are omitted.
        """
        expand = _expand_group_ids(facet)
        combination_prices: dict[str, dict[str, dict[GroupSubset, Decimal]]] = {}

        for context in self.contexts.customer_group_contexts(shop):
            index = build_price_index(self._fetch_prices(products, context))
            customer_group = context.customer_group.key

            for product in products:
                configuration = configurations.get(product.number)
                records = index.get(product.id)
                if configuration is None or records is None:
                    logger.debug(
                        "Skipping product without prices",
                        product_number=product.number,
                        customer_group=customer_group,
                        has_configuration=configuration is not None,
                    )
                    continue

                subsets = group_subsets(group.id for group in configuration)
                combination_prices.setdefault(customer_group, {})[product.number] = (
                    self.aggregator.cheapest_prices(configuration, records, subsets, expand)
                )

        calculated: ListingPrices = {}
        for context in self.contexts.price_contexts(shop):
            customer_prices = combination_prices.get(context.customer_group.key)
            if customer_prices is None:
                continue

            factor = context.currency.factor
            for number, product_prices in customer_prices.items():
                calculated.setdefault(number, {})[context.key] = {
                    subset.key: apply_currency_factor(price, factor, self.price_decimal_places)
                    for subset, price in product_prices.items()
                }

        logger.info(
            "Computed listing prices",
            shop_id=shop.id,
            product_count=len(products),
            priced_count=len(calculated),
        )
        return calculated

    def _fetch_prices(self, products: Sequence[ListProduct], context: PricingContext):
        product_ids = [product.id for product in products]
        variant_ids = [product.variant_id for product in products]
        return self.price_source.fetch_price_rows(product_ids, variant_ids, context)

    # ------------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------------

    def get_availability(
        self,
        products: Sequence[ListProduct],
        configurations: Configurations,
        facet: VariantFacet | None = None,
    ) -> dict[str, dict[str, bool]]:
        """Compute per group subset whether any matching variant is available.

        Args:
            products: Product batch.
            configurations: Groups per product number.
            facet: Optional variant facet.

        Returns:
            Availability keyed by product number, then by subset key.
            Products without configuration or stock rows are omitted.
        """
        expand = _expand_group_ids(facet)
        rows = self.availability_source.fetch_availability_rows(
            [product.variant_id for product in products]
        )
        index = build_availability_index(rows)

        result: dict[str, dict[str, bool]] = {}
        for product in products:
            configuration = configurations.get(product.number)
            records = index.get(product.id)
            if configuration is None or records is None:
                logger.debug(
                    "Skipping product without availability",
                    product_number=product.number,
                    has_configuration=configuration is not None,
                )
                continue

            subsets = group_subsets(group.id for group in configuration)
            result[product.number] = render_keys(
                self.aggregator.availability(configuration, records, subsets, expand)
            )

        logger.info(
            "Computed availability",
            product_count=len(products),
            available_count=len(result),
        )
        return result

    # ------------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------------

    def get_visibility(self, product: IndexedProduct, facet: VariantFacet) -> dict[str, bool]:
        """Decide for which expanded subsets the variant is listed.

        Args:
            product: Fully specified variant with its product's configuration.
            facet: Variant facet selecting the expand groups.

        Returns:
            Visibility keyed by subset key.
        """
        splitting = self.splitter.split(
            product.full_configuration,
            product.available_combinations,
            facet.expand_group_ids,
        )
        return render_keys(self.splitter.visibility(splitting, product.configuration))
