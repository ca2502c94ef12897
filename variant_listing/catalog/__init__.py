"""Variant combination engine.

Enumerates group subsets, indexes variant rows, aggregates prices and
availability per subset and splits the option space for listing visibility.
"""

from variant_listing.catalog.aggregator import CombinationAggregator, SubsetSelection, render_keys
from variant_listing.catalog.combinations import combinations, group_subsets
from variant_listing.catalog.indexes import (
    VariantIndex,
    build_availability_index,
    build_price_index,
)
from variant_listing.catalog.visibility import (
    AvailableCombinations,
    GroupAssignment,
    GroupRole,
    VisibilitySplitter,
    render_combination,
)

__all__ = [
    # Combinations
    "combinations",
    "group_subsets",
    # Indexes
    "VariantIndex",
    "build_availability_index",
    "build_price_index",
    # Aggregation
    "CombinationAggregator",
    "SubsetSelection",
    "render_keys",
    # Visibility
    "AvailableCombinations",
    "GroupAssignment",
    "GroupRole",
    "VisibilitySplitter",
    "render_combination",
]
