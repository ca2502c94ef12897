"""Tests for pricing context fan-out."""

from decimal import Decimal

from variant_listing.application.contexts import ContextFanout
from variant_listing.domain.value_objects import (
    Currency,
    CustomerGroup,
    PricingContext,
    Shop,
)
from variant_listing.infrastructure.catalog_store import InMemoryCatalogStore


class RecordingContextFactory:
    """Context factory that records the requested combinations."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, int, str]] = []

    def create_shop_context(
        self, shop_id: int, currency_id: int, customer_group_key: str
    ) -> PricingContext:
        self.calls.append((shop_id, currency_id, customer_group_key))
        return PricingContext(
            shop_id=shop_id,
            currency=Currency(id=currency_id, factor=Decimal("1")),
            customer_group=CustomerGroup(id=len(self.calls), key=customer_group_key),
            fallback_customer_group=CustomerGroup(id=0, key="EK"),
        )


class TestFanout:
    """Tests for ContextFanout.fanout()."""

    def test_cross_product_customer_group_major(self) -> None:
        """2 customer groups x 3 currencies give 6 contexts, customer group outer."""
        factory = RecordingContextFactory()
        fanout = ContextFanout(identifier_selector=None, context_factory=factory)  # type: ignore[arg-type]

        contexts = fanout.fanout(1, ["EK", "H"], [1, 2, 3])

        assert len(contexts) == 6
        assert [context.key for context in contexts] == [
            "EK_1",
            "EK_2",
            "EK_3",
            "H_1",
            "H_2",
            "H_3",
        ]
        assert all(call[0] == 1 for call in factory.calls)

    def test_empty_inputs(self) -> None:
        """No customer groups or no currencies, no contexts."""
        fanout = ContextFanout(None, RecordingContextFactory())  # type: ignore[arg-type]
        assert fanout.fanout(1, [], [1, 2]) == []
        assert fanout.fanout(1, ["EK"], []) == []


class TestShopContexts:
    """Tests for shop-derived contexts."""

    def test_customer_group_contexts_use_shop_currency(
        self, catalog_store: InMemoryCatalogStore, main_shop: Shop
    ) -> None:
        """The aggregation pass only uses the shop's own currency."""
        fanout = ContextFanout(catalog_store, catalog_store)
        contexts = fanout.customer_group_contexts(main_shop)
        assert [context.key for context in contexts] == ["EK_1", "H_1"]

    def test_price_contexts_use_every_shop_currency(
        self, catalog_store: InMemoryCatalogStore, main_shop: Shop
    ) -> None:
        """The conversion pass covers every currency of the shop."""
        fanout = ContextFanout(catalog_store, catalog_store)
        contexts = fanout.price_contexts(main_shop)
        assert [context.key for context in contexts] == ["EK_1", "EK_2", "H_1", "H_2"]
        assert contexts[1].currency.factor == Decimal("1.5")

    def test_sub_shop_uses_parent_currencies(
        self, catalog_store: InMemoryCatalogStore, sub_shop: Shop
    ) -> None:
        """Sub shops inherit the currencies of their main shop."""
        fanout = ContextFanout(catalog_store, catalog_store)
        contexts = fanout.price_contexts(sub_shop)
        assert [context.key for context in contexts] == ["EK_1", "EK_2", "H_1", "H_2"]
        assert all(context.shop_id == sub_shop.id for context in contexts)

    def test_fallback_customer_group_attached(
        self, catalog_store: InMemoryCatalogStore, main_shop: Shop
    ) -> None:
        """Every context carries the fallback customer group."""
        fanout = ContextFanout(catalog_store, catalog_store)
        contexts = fanout.customer_group_contexts(main_shop)
        assert {context.fallback_customer_group.key for context in contexts} == {"EK"}
