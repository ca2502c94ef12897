"""Pricing context fan-out.

Listing prices are computed for every customer group and currency of a
shop. The cross product is always customer-group major.
"""

from typing import Sequence

import structlog

from variant_listing.application.ports import ContextFactory, IdentifierSelector
from variant_listing.domain.value_objects import PricingContext, Shop

logger = structlog.get_logger()


class ContextFanout:
    """Builds the pricing contexts a listing batch is computed for."""

    def __init__(
        self,
        identifier_selector: IdentifierSelector,
        context_factory: ContextFactory,
    ) -> None:
        """Initialize fan-out.

        Args:
            identifier_selector: Resolves shop currencies and customer groups.
            context_factory: Creates a context per combination.
        """
        self.identifier_selector = identifier_selector
        self.context_factory = context_factory

    def fanout(
        self,
        shop_id: int,
        customer_groups: Sequence[str],
        currencies: Sequence[int],
    ) -> list[PricingContext]:
        """Create one context per customer group and currency.

        Args:
            shop_id: Shop the contexts belong to.
            customer_groups: Customer group keys (outer loop).
            currencies: Currency ids (inner loop).

        Returns:
            ``len(customer_groups) * len(currencies)`` contexts.
        """
        return [
            self.context_factory.create_shop_context(shop_id, currency_id, customer_group)
            for customer_group in customer_groups
            for currency_id in currencies
        ]

    def customer_group_contexts(self, shop: Shop) -> list[PricingContext]:
        """Contexts for every customer group in the shop's own currency."""
        customer_groups = self.identifier_selector.get_customer_group_keys()
        return self.fanout(shop.id, customer_groups, [shop.currency.id])

    def price_contexts(self, shop: Shop) -> list[PricingContext]:
        """Contexts for every customer group and every currency of the shop.

        Sub shops use the currencies of their main shop.
        """
        currency_shop_id = shop.id if shop.is_main else shop.parent_id
        currencies = self.identifier_selector.get_shop_currency_ids(currency_shop_id)
        customer_groups = self.identifier_selector.get_customer_group_keys()

        logger.debug(
            "Resolved price contexts",
            shop_id=shop.id,
            currency_shop_id=currency_shop_id,
            currencies=currencies,
            customer_groups=customer_groups,
        )
        return self.fanout(shop.id, customer_groups, currencies)
