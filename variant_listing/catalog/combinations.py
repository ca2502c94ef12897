"""Group subset enumeration.

Every non-empty subset of a product's configurator groups is a listing
facet the engine computes prices and availability for.
"""

from typing import Hashable, Iterable, TypeVar

from variant_listing.domain.exceptions import TooManyGroupsError
from variant_listing.domain.value_objects import GroupSubset
from variant_listing.infrastructure.config import settings

H = TypeVar("H", bound=Hashable)


def combinations(elements: Iterable[H], limit: int | None = None) -> list[tuple[H, ...]]:
    """Combine all elements with all elements.

    Starting from the empty combination, each element is prepended to every
    combination built so far. The result holds 2^n - 1 combinations for n
    distinct elements, in a deterministic order.

    Args:
        elements: Elements to combine; duplicates are ignored.
        limit: Maximum number of distinct elements, defaults to
            ``settings.max_combination_groups``.

    Returns:
        Every non-empty combination.

    Raises:
        TooManyGroupsError: If there are more distinct elements than ``limit``.
    """
    unique = list(dict.fromkeys(elements))
    limit = settings.max_combination_groups if limit is None else limit
    if len(unique) > limit:
        raise TooManyGroupsError(len(unique), limit)

    results: list[tuple[H, ...]] = [()]
    for element in unique:
        results.extend([(element,) + combination for combination in results])

    return [combination for combination in results if combination]


def group_subsets(group_ids: Iterable[int], limit: int | None = None) -> list[GroupSubset]:
    """Enumerate every non-empty subset of the given group ids."""
    return [GroupSubset.of(combination) for combination in combinations(group_ids, limit)]
