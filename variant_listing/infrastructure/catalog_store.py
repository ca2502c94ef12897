"""In-memory catalog store.

Holds a catalog snapshot (variants, stock, prices, shops, currencies and
customer groups) and implements every collaborator port of the listing
loader on top of it. The rules applied here are the ones a database-backed
source applies in SQL: inactive variants are never returned, price rows
only come from the unbounded quantity tier, and a customer group without
its own price falls back to the fallback customer group.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Sequence

import structlog

from variant_listing.domain.exceptions import ConfigurationError, UnknownReferenceError
from variant_listing.domain.value_objects import (
    AvailabilityRow,
    Currency,
    CustomerGroup,
    IndexedProduct,
    ListProduct,
    OptionGroup,
    PriceRow,
    PricingContext,
    Shop,
    parse_amount,
    parse_identifier,
)
from variant_listing.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Snapshot Records
# ============================================================================


@dataclass(frozen=True)
class VariantStock:
    """Stock data of one variant.

    Attributes:
        id: Variant identifier.
        product_id: Product the variant belongs to.
        number: Variant number.
        option_ids: Configurator options of the variant, one per group.
        active: Inactive variants are invisible to every query.
        in_stock: Stock quantity.
        min_purchase: Minimum purchase quantity.
        last_stock: Variant may only be sold while in stock.
    """

    id: int
    product_id: int
    number: str
    option_ids: tuple[int, ...]
    active: bool = True
    in_stock: int = 0
    min_purchase: int = 1
    last_stock: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", parse_identifier(self.id, "variant"))
        object.__setattr__(self, "product_id", parse_identifier(self.product_id, "product"))
        object.__setattr__(
            self, "option_ids", tuple(parse_identifier(o, "option") for o in self.option_ids)
        )

    @property
    def is_available(self) -> bool:
        """Enough stock for the minimum purchase."""
        return self.in_stock >= self.min_purchase

    @property
    def is_sellable(self) -> bool:
        """Last-stock variants need stock for the minimum purchase."""
        last_stock = int(self.last_stock)
        return last_stock * self.in_stock >= last_stock * self.min_purchase


@dataclass(frozen=True)
class PriceEntry:
    """A graduated price of a variant for one customer group.

    Attributes:
        variant_id: Variant the price belongs to.
        customer_group_key: Customer group the price applies to.
        price: Price in the base currency.
        from_quantity: First quantity of the tier.
        to_quantity: Last quantity of the tier, None for unbounded.
    """

    variant_id: int
    customer_group_key: str
    price: Decimal
    from_quantity: int = 1
    to_quantity: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "variant_id", parse_identifier(self.variant_id, "variant"))
        object.__setattr__(self, "price", parse_amount(self.price))

    @property
    def is_unbounded(self) -> bool:
        """Tier applies to all quantities from ``from_quantity`` on."""
        return self.to_quantity is None


@dataclass
class CatalogSnapshot:
    """Everything the store answers queries from.

    Attributes:
        groups: Configurator groups in declared order.
        variants: Variant stock records.
        prices: Price entries.
        shops: Shops by id.
        shop_currencies: Currency ids per main shop.
        currencies: Currencies by id.
        customer_groups: Customer groups by key, in declared order.
        fallback_customer_group: Key of the fallback customer group.
    """

    groups: list[OptionGroup] = field(default_factory=list)
    variants: list[VariantStock] = field(default_factory=list)
    prices: list[PriceEntry] = field(default_factory=list)
    shops: dict[int, Shop] = field(default_factory=dict)
    shop_currencies: dict[int, list[int]] = field(default_factory=dict)
    currencies: dict[int, Currency] = field(default_factory=dict)
    customer_groups: dict[str, CustomerGroup] = field(default_factory=dict)
    fallback_customer_group: str = field(
        default_factory=lambda: settings.default_fallback_customer_group
    )


# ============================================================================
# Store
# ============================================================================


class InMemoryCatalogStore:
    """Catalog collaborator backed by a snapshot.

    Implements PriceRowSource, AvailabilityRowSource, IdentifierSelector
    and ContextFactory.
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        """Initialize store.

        The snapshot is checked up front so that a broken catalog is
        rejected when it is loaded instead of on the first listing call.

        Args:
            snapshot: Catalog data, empty if not provided.

        Raises:
            ConfigurationError: If the snapshot is inconsistent.
        """
        self.snapshot = snapshot or CatalogSnapshot()
        self._option_groups: dict[int, int] = {}
        for group in self.snapshot.groups:
            for option in group.options:
                if option.id in self._option_groups:
                    raise ConfigurationError(
                        f"Option {option.id} is declared by more than one group",
                        details={"option_id": option.id},
                    )
                self._option_groups[option.id] = group.id

        self._validate_variants()
        self._validate_shops()

    def _validate_variants(self) -> None:
        for variant in self.snapshot.variants:
            seen: dict[int, int] = {}
            for option_id in variant.option_ids:
                group_id = self._option_groups.get(option_id)
                if group_id is None:
                    raise ConfigurationError(
                        f"Variant {variant.id} uses option {option_id} no group declares",
                        details={"variant_id": variant.id, "option_id": option_id},
                    )
                if group_id in seen:
                    raise ConfigurationError(
                        f"Variant {variant.id} has options {seen[group_id]} and "
                        f"{option_id} of group {group_id}",
                        details={
                            "variant_id": variant.id,
                            "group_id": group_id,
                            "option_ids": [seen[group_id], option_id],
                        },
                    )
                seen[group_id] = option_id

    def _validate_shops(self) -> None:
        shops = self.snapshot.shops
        currencies = self.snapshot.currencies

        for shop in shops.values():
            if shop.currency.id not in currencies:
                raise ConfigurationError(
                    f"Shop {shop.id} uses undeclared currency {shop.currency.id}",
                    details={"shop_id": shop.id, "currency_id": shop.currency.id},
                )
            if shop.parent_id is not None and shop.parent_id not in shops:
                raise ConfigurationError(
                    f"Shop {shop.id} references unknown parent shop {shop.parent_id}",
                    details={"shop_id": shop.id, "parent_id": shop.parent_id},
                )

        for shop_id, currency_ids in self.snapshot.shop_currencies.items():
            if shop_id not in shops:
                raise ConfigurationError(
                    f"Currencies assigned to unknown shop {shop_id}",
                    details={"shop_id": shop_id},
                )
            unknown = [
                currency_id for currency_id in currency_ids if currency_id not in currencies
            ]
            if unknown:
                raise ConfigurationError(
                    f"Shop {shop_id} is assigned undeclared currencies {unknown}",
                    details={"shop_id": shop_id, "currency_ids": unknown},
                )

    # ------------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------------

    def get_shop(self, shop_id: int) -> Shop:
        """Get a shop by id.

        Raises:
            UnknownReferenceError: If the shop does not exist.
        """
        shop = self.snapshot.shops.get(shop_id)
        if shop is None:
            raise UnknownReferenceError("Shop", shop_id)
        return shop

    def get_currency(self, currency_id: int) -> Currency:
        """Get a currency by id.

        Raises:
            UnknownReferenceError: If the currency does not exist.
        """
        currency = self.snapshot.currencies.get(currency_id)
        if currency is None:
            raise UnknownReferenceError("Currency", currency_id)
        return currency

    def get_customer_group(self, key: str) -> CustomerGroup:
        """Get a customer group by key.

        Raises:
            UnknownReferenceError: If the customer group does not exist.
        """
        customer_group = self.snapshot.customer_groups.get(key)
        if customer_group is None:
            raise UnknownReferenceError("CustomerGroup", key)
        return customer_group

    def group_of(self, option_id: int) -> int:
        """Get the group id of an option.

        Raises:
            UnknownReferenceError: If no group declares the option.
        """
        group_id = self._option_groups.get(option_id)
        if group_id is None:
            raise UnknownReferenceError("Option", option_id)
        return group_id

    def variants_of(self, product_ids: Iterable[int]) -> list[VariantStock]:
        """Active variants of the given products."""
        wanted = set(product_ids)
        return [
            variant
            for variant in self.snapshot.variants
            if variant.product_id in wanted and variant.active
        ]

    # ------------------------------------------------------------------------
    # IdentifierSelector
    # ------------------------------------------------------------------------

    def get_shop_currency_ids(self, shop_id: int) -> list[int]:
        """Currencies of a shop, its default currency when none are assigned."""
        shop = self.get_shop(shop_id)
        return list(self.snapshot.shop_currencies.get(shop.id, [shop.currency.id]))

    def get_customer_group_keys(self) -> list[str]:
        """Keys of every customer group."""
        return list(self.snapshot.customer_groups)

    # ------------------------------------------------------------------------
    # ContextFactory
    # ------------------------------------------------------------------------

    def create_shop_context(
        self,
        shop_id: int,
        currency_id: int,
        customer_group_key: str,
    ) -> PricingContext:
        """Create a pricing context.

        Raises:
            UnknownReferenceError: If any referenced entity does not exist.
        """
        shop = self.get_shop(shop_id)
        return PricingContext(
            shop_id=shop.id,
            currency=self.get_currency(currency_id),
            customer_group=self.get_customer_group(customer_group_key),
            fallback_customer_group=self.get_customer_group(
                self.snapshot.fallback_customer_group
            ),
        )

    # ------------------------------------------------------------------------
    # PriceRowSource
    # ------------------------------------------------------------------------

    def _unbounded_prices(self) -> dict[tuple[int, str], Decimal]:
        prices: dict[tuple[int, str], Decimal] = {}
        for entry in self.snapshot.prices:
            if entry.is_unbounded:
                prices[(entry.variant_id, entry.customer_group_key)] = entry.price
        return prices

    def fetch_price_rows(
        self,
        product_ids: Sequence[int],
        variant_ids: Sequence[int],
        context: PricingContext,
    ) -> list[PriceRow]:
        """Price rows of every sellable variant of the given products.

        ``variant_ids`` are the listed variants of the batch; prices are
        returned for all variants of their products, since every variant
        takes part in the combination prices.
        """
        prices = self._unbounded_prices()
        current = context.customer_group.key
        fallback = context.fallback_customer_group.key

        rows: list[PriceRow] = []
        for variant in self.variants_of(product_ids):
            if not variant.is_sellable:
                continue
            price = prices.get((variant.id, current), prices.get((variant.id, fallback)))
            if price is None:
                continue
            rows.extend(
                PriceRow(
                    product_id=variant.product_id,
                    variant_id=variant.id,
                    option_id=option_id,
                    group_id=self.group_of(option_id),
                    price=price,
                )
                for option_id in variant.option_ids
            )

        logger.debug(
            "Fetched price rows",
            context=context.key,
            product_count=len(product_ids),
            variant_count=len(variant_ids),
            row_count=len(rows),
        )
        return rows

    # ------------------------------------------------------------------------
    # AvailabilityRowSource
    # ------------------------------------------------------------------------

    def fetch_availability_rows(self, variant_ids: Sequence[int]) -> list[AvailabilityRow]:
        """Availability rows of every active variant of the products owning the variants."""
        wanted = set(variant_ids)
        product_ids = {
            variant.product_id for variant in self.snapshot.variants if variant.id in wanted
        }

        rows = [
            AvailabilityRow(
                product_id=variant.product_id,
                variant_id=variant.id,
                option_id=option_id,
                group_id=self.group_of(option_id),
                available=variant.is_available,
            )
            for variant in self.variants_of(product_ids)
            for option_id in variant.option_ids
        ]

        logger.debug(
            "Fetched availability rows",
            variant_count=len(variant_ids),
            row_count=len(rows),
        )
        return rows

    # ------------------------------------------------------------------------
    # Product Configuration
    # ------------------------------------------------------------------------

    def configuration_of(self, product_id: int) -> list[OptionGroup]:
        """Groups used by a product's variants.

        Groups and options keep their declared order; options no variant
        of the product uses are left out.
        """
        used = {
            option_id
            for variant in self.snapshot.variants
            if variant.product_id == product_id
            for option_id in variant.option_ids
        }
        configuration = []
        for group in self.snapshot.groups:
            options = tuple(option for option in group.options if option.id in used)
            if options:
                configuration.append(OptionGroup(id=group.id, options=options, name=group.name))
        return configuration

    def list_product(self, variant_id: int) -> ListProduct:
        """Listing representation of a variant.

        Raises:
            UnknownReferenceError: If the variant does not exist.
        """
        variant = self._variant(variant_id)
        return ListProduct(id=variant.product_id, variant_id=variant.id, number=variant.number)

    def indexed_product(self, variant_id: int) -> IndexedProduct:
        """Prepare a variant for visibility computation.

        Available combinations are the option sets of the product's active
        variants that are in stock.

        Raises:
            UnknownReferenceError: If the variant does not exist.
        """
        variant = self._variant(variant_id)
        full_configuration = self.configuration_of(variant.product_id)

        selected = set(variant.option_ids)
        configuration = [
            OptionGroup(
                id=group.id,
                options=tuple(option for option in group.options if option.id in selected),
                name=group.name,
            )
            for group in full_configuration
        ]

        available = [
            "-".join(str(option_id) for option_id in sorted(other.option_ids))
            for other in self.variants_of([variant.product_id])
            if other.is_available
        ]

        return IndexedProduct(
            number=variant.number,
            full_configuration=tuple(full_configuration),
            configuration=tuple(group for group in configuration if group.options),
            available_combinations=tuple(available),
        )

    def _variant(self, variant_id: int) -> VariantStock:
        for variant in self.snapshot.variants:
            if variant.id == variant_id:
                return variant
        raise UnknownReferenceError("Variant", variant_id)


# Global store instance
_store: InMemoryCatalogStore | None = None


def get_catalog_store() -> InMemoryCatalogStore:
    """Get catalog store singleton."""
    global _store
    if _store is None:
        _store = InMemoryCatalogStore()
    return _store


def set_catalog_store(store: InMemoryCatalogStore | None) -> None:
    """Replace the catalog store singleton."""
    global _store
    _store = store
