"""Domain layer - value objects and exceptions of the listing engine.

- **Value Objects**: configurator groups and options, variant records,
  group subsets, shops, currencies and pricing contexts
- **Exceptions**: configuration and catalog errors

Example usage:
    from variant_listing.domain import GroupSubset, OptionGroup

    size = OptionGroup.of(10, [100, 101])
    subset = GroupSubset.of([20, 10])
    print(subset.key)  # g10-20
"""

# Base classes
from variant_listing.domain.base import ValueObject

# Exceptions
from variant_listing.domain.exceptions import (
    CatalogError,
    ConfigurationError,
    DomainError,
    EmptyOptionGroupError,
    InvalidGroupSubsetError,
    InvalidIdentifierError,
    OptionGroupMismatchError,
    TooManyGroupsError,
    UnknownGroupError,
    UnknownReferenceError,
)

# Value Objects
from variant_listing.domain.value_objects import (
    AvailabilityRow,
    Currency,
    CustomerGroup,
    GroupSubset,
    IndexedProduct,
    ListProduct,
    Option,
    OptionGroup,
    PriceRow,
    PricingContext,
    Shop,
    VariantFacet,
    VariantRecord,
    parse_amount,
    parse_identifier,
    parse_option_combination,
)

__all__ = [
    # Base
    "ValueObject",
    # Exceptions
    "CatalogError",
    "ConfigurationError",
    "DomainError",
    "EmptyOptionGroupError",
    "InvalidGroupSubsetError",
    "InvalidIdentifierError",
    "OptionGroupMismatchError",
    "TooManyGroupsError",
    "UnknownGroupError",
    "UnknownReferenceError",
    # Value Objects
    "AvailabilityRow",
    "Currency",
    "CustomerGroup",
    "GroupSubset",
    "IndexedProduct",
    "ListProduct",
    "Option",
    "OptionGroup",
    "PriceRow",
    "PricingContext",
    "Shop",
    "VariantFacet",
    "VariantRecord",
    "parse_amount",
    "parse_identifier",
    "parse_option_combination",
]
