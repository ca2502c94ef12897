"""Price and availability indexes.

Collaborators return one row per (variant, option) pair. The indexes
collapse those rows into one VariantRecord per variant, grouped by product.
A variant missing from the rows (inactive, out of stock, unpriced) is
missing from the index.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Generic, Iterable, TypeVar

from variant_listing.domain.value_objects import AvailabilityRow, PriceRow, VariantRecord

R = TypeVar("R", PriceRow, AvailabilityRow)
T = TypeVar("T")

VariantIndex = dict[int, list[VariantRecord[T]]]


@dataclass
class _VariantAccumulator(Generic[T]):
    """Options and groups collected for one variant."""

    variant_id: int
    payload: T
    option_ids: list[int] = field(default_factory=list)
    group_ids: list[int] = field(default_factory=list)

    def to_record(self) -> VariantRecord[T]:
        return VariantRecord(
            variant_id=self.variant_id,
            option_ids=tuple(self.option_ids),
            group_ids=tuple(self.group_ids),
            payload=self.payload,
        )


def _build_index(rows: Iterable[R], payload: Callable[[R], T]) -> VariantIndex[T]:
    products: dict[int, dict[int, _VariantAccumulator[T]]] = {}

    for row in rows:
        variants = products.setdefault(row.product_id, {})
        accumulator = variants.get(row.variant_id)
        if accumulator is None:
            accumulator = _VariantAccumulator(variant_id=row.variant_id, payload=payload(row))
            variants[row.variant_id] = accumulator
        else:
            # Rows of one variant carry the same payload; the last one wins
            accumulator.payload = payload(row)
        accumulator.option_ids.append(row.option_id)
        accumulator.group_ids.append(row.group_id)

    return {
        product_id: [accumulator.to_record() for accumulator in variants.values()]
        for product_id, variants in products.items()
    }


def build_price_index(rows: Iterable[PriceRow]) -> VariantIndex[Decimal]:
    """Collapse price rows into per-product variant records.

    Args:
        rows: Rows already restricted to the unbounded quantity tier and to
            active variants passing the last-stock rule.

    Returns:
        Mapping of product id to its priced variants, in first-seen order.
    """
    return _build_index(rows, lambda row: row.price)


def build_availability_index(rows: Iterable[AvailabilityRow]) -> VariantIndex[bool]:
    """Collapse availability rows into per-product variant records.

    Args:
        rows: Rows of active variants.

    Returns:
        Mapping of product id to its variants, in first-seen order.
    """
    return _build_index(rows, lambda row: row.available)
