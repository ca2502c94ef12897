"""Listing visibility of variants.

When a facet expands groups, a product is listed once per option
combination of the expanded groups. For every subset of the expand groups
the splitter enumerates the option combinations that actually exist; a
variant is visible for that subset when its own option combination is one
of them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

import structlog

from variant_listing.catalog.combinations import combinations
from variant_listing.domain.value_objects import (
    GroupSubset,
    OptionGroup,
    parse_option_combination,
)

logger = structlog.get_logger()

OptionCombination = tuple[int, ...]


class GroupRole(str, Enum):
    """How a group takes part in a partition."""

    EXPAND_ACTIVE = "expand_active"
    EXPAND_PINNED = "expand_pinned"
    NEVER_EXPAND = "never_expand"

    @property
    def is_pinned(self) -> bool:
        """Pinned groups only contribute their first available option."""
        return self is not GroupRole.EXPAND_ACTIVE


@dataclass(frozen=True)
class GroupAssignment:
    """A group with its role inside one partition."""

    group: OptionGroup
    role: GroupRole


class AvailableCombinations:
    """Set of purchasable option combinations of a product.

    A partial combination is available when all of its options occur
    together in at least one purchasable combination.
    """

    def __init__(self, combinations: Iterable[str | Iterable[int]]) -> None:
        self._combinations: list[frozenset[int]] = []
        for combination in combinations:
            if isinstance(combination, str):
                self._combinations.append(parse_option_combination(combination))
            else:
                self._combinations.append(frozenset(combination))

    def __contains__(self, option_ids: object) -> bool:
        if not isinstance(option_ids, (tuple, list, set, frozenset)):
            return False
        candidate = set(option_ids)
        return any(candidate <= combination for combination in self._combinations)

    def __len__(self) -> int:
        return len(self._combinations)


class VisibilitySplitter:
    """Partition a product's option space per expanded group subset."""

    @staticmethod
    def assign_roles(
        groups: Sequence[OptionGroup],
        considered: Iterable[OptionGroup],
        expand_group_ids: frozenset[int],
    ) -> list[GroupAssignment]:
        """Order the groups of one partition and assign their roles.

        Active groups come first, ascending by id, followed by the pinned
        expand groups and the never-expanding groups in declared order.
        """
        considered_ids = {group.id for group in considered}
        active = sorted(
            (group for group in groups if group.id in considered_ids),
            key=lambda group: group.id,
        )
        assignments = [GroupAssignment(group, GroupRole.EXPAND_ACTIVE) for group in active]
        assignments.extend(
            GroupAssignment(group, GroupRole.EXPAND_PINNED)
            for group in groups
            if group.id in expand_group_ids and group.id not in considered_ids
        )
        assignments.extend(
            GroupAssignment(group, GroupRole.NEVER_EXPAND)
            for group in groups
            if group.id not in expand_group_ids
        )
        return assignments

    @staticmethod
    def enumerate_combinations(
        assignments: Sequence[GroupAssignment],
        available: AvailableCombinations,
    ) -> list[OptionCombination]:
        """Build every available option combination across the groups.

        Options are tried ascending by id. Pinned groups stop at the first
        available option per partial combination. A group without any
        available option is skipped and the previous combinations carry on.
        """
        result: list[OptionCombination] = [()]

        for assignment in assignments:
            options = assignment.group.sorted_options()
            extended: list[OptionCombination] = []

            for partial in result:
                for option in options:
                    candidate = tuple(sorted(partial + (option.id,)))
                    if candidate not in available:
                        continue
                    extended.append(candidate)
                    if assignment.role.is_pinned:
                        break

            if not extended:
                continue
            result = extended

        return result

    def split(
        self,
        groups: Sequence[OptionGroup],
        available_combinations: Iterable[str | Iterable[int]],
        expand_group_ids: Iterable[int],
    ) -> dict[GroupSubset, list[OptionCombination]]:
        """Enumerate existing option combinations per expand-group subset.

        Args:
            groups: Full configuration of the product.
            available_combinations: Purchasable combinations, either
                dash-joined option id strings or iterables of option ids.
            expand_group_ids: Groups listed separately by the facet.

        Returns:
            Mapping of expand-group subset to its option combinations.
            Non-expanding groups never form a partition of their own.
        """
        expand = frozenset(expand_group_ids)
        available = AvailableCombinations(available_combinations)
        considerable = [group for group in groups if group.id in expand]

        splitting: dict[GroupSubset, list[OptionCombination]] = {}
        for considered in combinations(considerable):
            assignments = self.assign_roles(groups, considered, expand)
            subset = GroupSubset.of(group.id for group in considered)
            splitting[subset] = self.enumerate_combinations(assignments, available)

        logger.debug(
            "Split option space",
            group_count=len(groups),
            partition_count=len(splitting),
            available_count=len(available),
        )
        return splitting

    @staticmethod
    def configuration_key(configuration: Iterable[OptionGroup]) -> OptionCombination:
        """Ascending option ids of a fully specified configuration."""
        return tuple(sorted(option.id for group in configuration for option in group.options))

    def visibility(
        self,
        splitting: dict[GroupSubset, list[OptionCombination]],
        configuration: Iterable[OptionGroup],
    ) -> dict[GroupSubset, bool]:
        """Decide per partition whether the configured variant is listed."""
        key = self.configuration_key(configuration)
        return {subset: key in variants for subset, variants in splitting.items()}


def render_combination(combination: OptionCombination) -> str:
    """Render an option combination as ``<id>-<id>``."""
    return "-".join(str(option_id) for option_id in combination)
