"""Combination aggregation.

For every group subset of a product, reduce the variant records that share
the subset's option selection to a single value: the cheapest price or the
best availability.

Each group is represented by its baseline option (the first declared one).
For a subset S, the groups of S split into expanding groups (listed
separately by the facet) and pinned groups. A record matches S when, after
dropping the baseline options of the pinned groups, its options contain
exactly the baseline options of the expanding groups. Without a facet no
group expands and every record matches every subset.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Sequence, TypeVar

import structlog

from variant_listing.domain.exceptions import UnknownGroupError
from variant_listing.domain.value_objects import GroupSubset, OptionGroup, VariantRecord

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class SubsetSelection:
    """Baseline options a subset pins and expands.

    Attributes:
        subset: The evaluated group subset.
        pinned_option_ids: Baseline options of the subset's non-expanding groups.
        expanding_option_ids: Ascending baseline options of the subset's
            expanding groups.
    """

    subset: GroupSubset
    pinned_option_ids: frozenset[int]
    expanding_option_ids: tuple[int, ...]

    def matches(self, record: VariantRecord) -> bool:
        """Check whether a variant record shares this selection."""
        expanding = set(self.expanding_option_ids)
        remaining = [
            option_id
            for option_id in record.option_ids
            if option_id not in self.pinned_option_ids and option_id in expanding
        ]
        return sorted(remaining) == list(self.expanding_option_ids)


class CombinationAggregator:
    """Reduce variant records per group subset.

    Example:
        aggregator = CombinationAggregator()
        prices = aggregator.cheapest_prices(configuration, records, subsets, {10})
        prices[GroupSubset.of([10])]  # cheapest price for the facet "g10"
    """

    @staticmethod
    def baseline_options(configuration: Iterable[OptionGroup]) -> dict[int, int]:
        """Map each group id to the id of its first declared option."""
        return {group.id: group.baseline_option.id for group in configuration}

    @staticmethod
    def selection(
        subset: GroupSubset,
        baseline: dict[int, int],
        expand_group_ids: frozenset[int] | set[int],
    ) -> SubsetSelection:
        """Split a subset's baseline options into pinned and expanding ones.

        Raises:
            UnknownGroupError: If the subset references a group without baseline.
        """
        pinned: set[int] = set()
        expanding: list[int] = []
        for group_id in subset:
            if group_id not in baseline:
                raise UnknownGroupError(group_id)
            if group_id in expand_group_ids:
                expanding.append(baseline[group_id])
            else:
                pinned.add(baseline[group_id])
        return SubsetSelection(
            subset=subset,
            pinned_option_ids=frozenset(pinned),
            expanding_option_ids=tuple(sorted(expanding)),
        )

    def aggregate(
        self,
        configuration: Sequence[OptionGroup],
        records: Sequence[VariantRecord[T]],
        subsets: Iterable[GroupSubset],
        expand_group_ids: Iterable[int],
        reduce: Callable[[list[T]], T],
    ) -> dict[GroupSubset, T]:
        """Aggregate record payloads for every subset.

        Args:
            configuration: Groups of the product, options in declared order.
            records: Variant records of the product.
            subsets: Group subsets to evaluate.
            expand_group_ids: Groups listed separately by the facet.
            reduce: Reduction over the matching payloads.

        Returns:
            Mapping of subset to reduced payload. Subsets without any
            matching record are omitted.
        """
        baseline = self.baseline_options(configuration)
        expand = frozenset(expand_group_ids)

        result: dict[GroupSubset, T] = {}
        for subset in subsets:
            selection = self.selection(subset, baseline, expand)
            payloads = [record.payload for record in records if selection.matches(record)]
            if payloads:
                result[subset] = reduce(payloads)

        logger.debug(
            "Aggregated combinations",
            record_count=len(records),
            result_count=len(result),
            expand_group_ids=sorted(expand),
        )
        return result

    def cheapest_prices(
        self,
        configuration: Sequence[OptionGroup],
        records: Sequence[VariantRecord[Decimal]],
        subsets: Iterable[GroupSubset],
        expand_group_ids: Iterable[int] = (),
    ) -> dict[GroupSubset, Decimal]:
        """Cheapest price per subset. Ties resolve to the first record."""
        return self.aggregate(configuration, records, subsets, expand_group_ids, min)

    def availability(
        self,
        configuration: Sequence[OptionGroup],
        records: Sequence[VariantRecord[bool]],
        subsets: Iterable[GroupSubset],
        expand_group_ids: Iterable[int] = (),
    ) -> dict[GroupSubset, bool]:
        """Whether any matching variant is available, per subset."""
        return self.aggregate(configuration, records, subsets, expand_group_ids, max)


def render_keys(values: dict[GroupSubset, T]) -> dict[str, T]:
    """Render subset keys as ``g<id>-<id>`` strings, keeping order."""
    return {subset.key: value for subset, value in values.items()}
