"""Shared fixtures.

The sample catalog has one configurable product (id 1) with two groups:

    Size  (10): 100, 101
    Color (20): 200, 201

    variant  options    stock  EK price  H price  notes
    1001     100, 200   5      8.00      4.00
    1002     101, 200   3      7.00      -        H falls back to EK
    1003     100, 201   0      9.00      -        out of stock
    1004     101, 201   9      3.00      -        inactive
"""

from decimal import Decimal

import pytest

from variant_listing.domain.value_objects import Currency, CustomerGroup, OptionGroup, Shop
from variant_listing.infrastructure.catalog_store import (
    CatalogSnapshot,
    InMemoryCatalogStore,
    PriceEntry,
    VariantStock,
)

EUR = Currency(id=1, factor=Decimal("1"), code="EUR")
USD = Currency(id=2, factor=Decimal("1.5"), code="USD")
CHF = Currency(id=3, factor=Decimal("1.0755"), code="CHF")


@pytest.fixture
def size_group() -> OptionGroup:
    """Size group with options 100, 101."""
    return OptionGroup.of(10, [100, 101], name="Size")


@pytest.fixture
def color_group() -> OptionGroup:
    """Color group with options 200, 201."""
    return OptionGroup.of(20, [200, 201], name="Color")


@pytest.fixture
def main_shop() -> Shop:
    """Main shop selling in EUR."""
    return Shop(id=1, currency=EUR)


@pytest.fixture
def sub_shop() -> Shop:
    """Sub shop of the main shop."""
    return Shop(id=2, currency=EUR, is_main=False, parent_id=1)


@pytest.fixture
def catalog_snapshot(
    size_group: OptionGroup,
    color_group: OptionGroup,
    main_shop: Shop,
    sub_shop: Shop,
) -> CatalogSnapshot:
    """Sample catalog snapshot."""
    return CatalogSnapshot(
        groups=[size_group, color_group],
        variants=[
            VariantStock(id=1001, product_id=1, number="SW1001", option_ids=(100, 200), in_stock=5),
            VariantStock(id=1002, product_id=1, number="SW1002", option_ids=(101, 200), in_stock=3),
            VariantStock(id=1003, product_id=1, number="SW1003", option_ids=(100, 201), in_stock=0),
            VariantStock(
                id=1004,
                product_id=1,
                number="SW1004",
                option_ids=(101, 201),
                in_stock=9,
                active=False,
            ),
        ],
        prices=[
            PriceEntry(variant_id=1001, customer_group_key="EK", price=Decimal("8.00")),
            PriceEntry(variant_id=1002, customer_group_key="EK", price=Decimal("7.00")),
            PriceEntry(variant_id=1003, customer_group_key="EK", price=Decimal("9.00")),
            PriceEntry(variant_id=1004, customer_group_key="EK", price=Decimal("3.00")),
            PriceEntry(variant_id=1001, customer_group_key="H", price=Decimal("4.00")),
            # Graduated tier, never used for listings
            PriceEntry(
                variant_id=1002,
                customer_group_key="EK",
                price=Decimal("1.00"),
                from_quantity=1,
                to_quantity=10,
            ),
        ],
        shops={main_shop.id: main_shop, sub_shop.id: sub_shop},
        shop_currencies={1: [EUR.id, USD.id]},
        currencies={EUR.id: EUR, USD.id: USD, CHF.id: CHF},
        customer_groups={
            "EK": CustomerGroup(id=1, key="EK"),
            "H": CustomerGroup(id=2, key="H"),
        },
        fallback_customer_group="EK",
    )


@pytest.fixture
def catalog_store(catalog_snapshot: CatalogSnapshot) -> InMemoryCatalogStore:
    """Store over the sample catalog."""
    return InMemoryCatalogStore(catalog_snapshot)
