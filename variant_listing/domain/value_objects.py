"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. Every structure the listing engine consumes or
produces is one of these: configurator groups and options, variant records,
group subsets and the pricing context they are computed for.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, Iterable, Iterator, Self, TypeVar

from variant_listing.domain.base import ValueObject
from variant_listing.domain.exceptions import (
    ConfigurationError,
    EmptyOptionGroupError,
    InvalidGroupSubsetError,
    InvalidIdentifierError,
    OptionGroupMismatchError,
)

T = TypeVar("T")

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_SUBSET_KEY_PATTERN = re.compile(r"g(\d+(?:-\d+)*)")


# ============================================================================
# Identifier Parsing
# ============================================================================


def parse_identifier(value: Any, field: str = "option") -> int:
    """Parse a catalog identifier into an int.

    Database drivers hand identifiers over as ints, numeric strings or
    decimals. Anything that is not integral is a configuration fault.

    Args:
        value: Raw identifier.
        field: Name of the identifier, used in the error message.

    Returns:
        Identifier as int.

    Raises:
        InvalidIdentifierError: If the value is not an integral number.
    """
    if isinstance(value, bool):
        raise InvalidIdentifierError(field, value)
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        raise InvalidIdentifierError(field, value)
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise InvalidIdentifierError(field, value)
    if isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidIdentifierError(field, value)


def parse_amount(value: Any) -> Decimal:
    """Parse a price amount into a Decimal.

    Floats go through their string representation so 19.99 stays 19.99.

    Raises:
        ConfigurationError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid price amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigurationError(
            f"Invalid price amount: {value!r}", details={"value": repr(value)}
        ) from e
    if not amount.is_finite():
        raise ConfigurationError(
            f"Invalid price amount: {value!r}", details={"value": repr(value)}
        )
    return amount


def parse_option_combination(value: str) -> frozenset[int]:
    """Parse a dash-joined option id string (e.g. "100-200") into a set of ids."""
    return frozenset(
        parse_identifier(part, "option") for part in str(value).split("-")
    )


# ============================================================================
# Configurator
# ============================================================================


@dataclass(frozen=True)
class Option(ValueObject):
    """A selectable configurator value (e.g. "Red").

    Attributes:
        id: Option identifier.
        group_id: Identifier of the group this option belongs to.
        name: Optional display name.
    """

    id: int
    group_id: int
    name: str | None = None

    def __post_init__(self) -> None:
        """Normalize identifiers."""
        object.__setattr__(self, "id", parse_identifier(self.id, "option"))
        object.__setattr__(self, "group_id", parse_identifier(self.group_id, "group"))


@dataclass(frozen=True)
class OptionGroup(ValueObject):
    """A configurator dimension (e.g. "Color").

    The declared option order is significant: the first declared option
    is the group's baseline, used to represent the group whenever it is
    not part of the subset being evaluated.

    Attributes:
        id: Group identifier.
        options: Options in declared order.
        name: Optional display name.
    """

    id: int
    options: tuple[Option, ...] = ()
    name: str | None = None

    def __post_init__(self) -> None:
        """Normalize identifiers and check option ownership."""
        object.__setattr__(self, "id", parse_identifier(self.id, "group"))
        object.__setattr__(self, "options", tuple(self.options))
        for option in self.options:
            if option.group_id != self.id:
                raise OptionGroupMismatchError(option.id, option.group_id, self.id)

    @classmethod
    def of(
        cls,
        group_id: int | str,
        option_ids: Iterable[int | str],
        name: str | None = None,
    ) -> Self:
        """Create a group from bare option ids.

        Args:
            group_id: Group identifier.
            option_ids: Option identifiers in declared order.
            name: Optional display name.

        Returns:
            OptionGroup instance.
        """
        gid = parse_identifier(group_id, "group")
        return cls(
            id=gid,
            options=tuple(Option(id=oid, group_id=gid) for oid in option_ids),
            name=name,
        )

    @property
    def baseline_option(self) -> Option:
        """First declared option of the group.

        Raises:
            EmptyOptionGroupError: If the group has no options.
        """
        if not self.options:
            raise EmptyOptionGroupError(self.id)
        return self.options[0]

    def sorted_options(self) -> list[Option]:
        """Options ascending by id, ties kept in declared order."""
        return sorted(self.options, key=lambda option: option.id)

    @property
    def option_ids(self) -> tuple[int, ...]:
        """Option ids in declared order."""
        return tuple(option.id for option in self.options)


# ============================================================================
# Group Subsets
# ============================================================================


@dataclass(frozen=True)
class GroupSubset(ValueObject):
    """A non-empty set of group ids, the unit of aggregation.

    Group ids are stored ascending and without duplicates, so two subsets
    built from the same ids in any order compare and hash equal.

    Attributes:
        group_ids: Ascending group identifiers.
    """

    group_ids: tuple[int, ...]

    def __post_init__(self) -> None:
        """Normalize and validate group ids."""
        ids = tuple(sorted({parse_identifier(g, "group") for g in self.group_ids}))
        if not ids:
            raise InvalidGroupSubsetError("g", "a group subset cannot be empty")
        object.__setattr__(self, "group_ids", ids)

    @classmethod
    def of(cls, group_ids: Iterable[int | str]) -> Self:
        """Create a subset from any iterable of group ids."""
        return cls(group_ids=tuple(group_ids))

    @classmethod
    def parse(cls, key: str) -> Self:
        """Parse a canonical subset key.

        Only canonical keys are accepted, so ``parse(key).key == key``
        always holds.

        Args:
            key: Key of the form ``g<id>-<id>-...``, ids ascending, unique
                and without leading zeros.

        Returns:
            GroupSubset instance.

        Raises:
            InvalidGroupSubsetError: If the key is malformed or not canonical.
        """
        match = _SUBSET_KEY_PATTERN.fullmatch(key)
        if match is None:
            raise InvalidGroupSubsetError(key, "expected 'g<id>-<id>-...'")
        subset = cls(group_ids=tuple(int(part) for part in match.group(1).split("-")))
        if subset.key != key:
            raise InvalidGroupSubsetError(
                key, f"not canonical, expected '{subset.key}'"
            )
        return subset

    @property
    def key(self) -> str:
        """Canonical key, e.g. ``g10-20``."""
        return "g" + "-".join(str(group_id) for group_id in self.group_ids)

    def __str__(self) -> str:
        """Return the canonical key."""
        return self.key

    def __iter__(self) -> Iterator[int]:
        return iter(self.group_ids)

    def __len__(self) -> int:
        return len(self.group_ids)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self.group_ids


@dataclass(frozen=True)
class VariantFacet(ValueObject):
    """Listing facet configuration.

    Attributes:
        expand_group_ids: Groups whose options are shown as separate
            listing entries instead of collapsing to the cheapest variant.
    """

    expand_group_ids: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Normalize group ids."""
        object.__setattr__(
            self,
            "expand_group_ids",
            frozenset(parse_identifier(g, "group") for g in self.expand_group_ids),
        )

    @classmethod
    def expanding(cls, *group_ids: int) -> Self:
        """Create a facet expanding the given groups."""
        return cls(expand_group_ids=frozenset(group_ids))


# ============================================================================
# Variant Records
# ============================================================================


@dataclass(frozen=True)
class VariantRecord(ValueObject, Generic[T]):
    """One variant of a product with its options and an aggregation payload.

    Option ids and group ids are each sorted ascending on construction.
    The two lists are sorted independently, so position i of one list
    does not necessarily correspond to position i of the other.

    Attributes:
        variant_id: Variant identifier.
        option_ids: Ascending option ids of the variant.
        group_ids: Ascending group ids of the variant.
        payload: Price or availability of the variant.
    """

    variant_id: int
    option_ids: tuple[int, ...]
    group_ids: tuple[int, ...]
    payload: T

    def __post_init__(self) -> None:
        """Sort ids and check both lists have the same length."""
        if len(self.option_ids) != len(self.group_ids):
            raise ConfigurationError(
                f"Variant {self.variant_id} has {len(self.option_ids)} options "
                f"but {len(self.group_ids)} groups",
                details={"variant_id": self.variant_id},
            )
        object.__setattr__(self, "variant_id", parse_identifier(self.variant_id, "variant"))
        object.__setattr__(
            self, "option_ids", tuple(sorted(parse_identifier(o, "option") for o in self.option_ids))
        )
        object.__setattr__(
            self, "group_ids", tuple(sorted(parse_identifier(g, "group") for g in self.group_ids))
        )


# ============================================================================
# Raw Rows
# ============================================================================


@dataclass(frozen=True)
class PriceRow(ValueObject):
    """One (variant, option) price row as returned by the pricing collaborator."""

    product_id: int
    variant_id: int
    option_id: int
    group_id: int
    price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "product_id", parse_identifier(self.product_id, "product"))
        object.__setattr__(self, "variant_id", parse_identifier(self.variant_id, "variant"))
        object.__setattr__(self, "option_id", parse_identifier(self.option_id, "option"))
        object.__setattr__(self, "group_id", parse_identifier(self.group_id, "group"))
        object.__setattr__(self, "price", parse_amount(self.price))


@dataclass(frozen=True)
class AvailabilityRow(ValueObject):
    """One (variant, option) availability row as returned by the stock collaborator."""

    product_id: int
    variant_id: int
    option_id: int
    group_id: int
    available: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "product_id", parse_identifier(self.product_id, "product"))
        object.__setattr__(self, "variant_id", parse_identifier(self.variant_id, "variant"))
        object.__setattr__(self, "option_id", parse_identifier(self.option_id, "option"))
        object.__setattr__(self, "group_id", parse_identifier(self.group_id, "group"))
        object.__setattr__(self, "available", bool(self.available))


# ============================================================================
# Shops and Pricing Contexts
# ============================================================================


@dataclass(frozen=True)
class Currency(ValueObject):
    """Shop currency.

    Attributes:
        id: Currency identifier.
        factor: Multiplier applied to base-currency prices.
        code: Optional ISO 4217 code.
    """

    id: int
    factor: Decimal = Decimal("1")
    code: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", parse_identifier(self.id, "currency"))
        object.__setattr__(self, "factor", parse_amount(self.factor))


@dataclass(frozen=True)
class CustomerGroup(ValueObject):
    """Customer group (e.g. "EK" for end customers, "H" for resellers)."""

    id: int
    key: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", parse_identifier(self.id, "customer group"))


@dataclass(frozen=True)
class Shop(ValueObject):
    """A shop of the platform.

    Sub shops (``is_main`` False) share the currencies of their parent shop.

    Attributes:
        id: Shop identifier.
        currency: Default currency of the shop.
        is_main: Whether the shop is a main shop.
        parent_id: Main shop of a sub shop.
    """

    id: int
    currency: Currency
    is_main: bool = True
    parent_id: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", parse_identifier(self.id, "shop"))
        if self.parent_id is not None:
            object.__setattr__(self, "parent_id", parse_identifier(self.parent_id, "shop"))
        if not self.is_main and self.parent_id is None:
            raise ConfigurationError(
                f"Sub shop {self.id} has no parent shop", details={"shop_id": self.id}
            )


@dataclass(frozen=True)
class PricingContext(ValueObject):
    """The (customer group, currency, shop) triple prices are computed for.

    Attributes:
        shop_id: Shop the prices are computed for.
        currency: Currency of the context, carrying the conversion factor.
        customer_group: Customer group whose prices apply.
        fallback_customer_group: Group whose prices apply when the current
            group has none.
    """

    shop_id: int
    currency: Currency
    customer_group: CustomerGroup
    fallback_customer_group: CustomerGroup

    @property
    def key(self) -> str:
        """Result key, e.g. ``EK_1``."""
        return f"{self.customer_group.key}_{self.currency.id}"


# ============================================================================
# Products
# ============================================================================


@dataclass(frozen=True)
class ListProduct(ValueObject):
    """Product as it appears in a listing batch.

    Attributes:
        id: Product identifier.
        variant_id: Identifier of the variant representing the product.
        number: Product number; result maps are keyed by it.
    """

    id: int
    variant_id: int
    number: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", parse_identifier(self.id, "product"))
        object.__setattr__(self, "variant_id", parse_identifier(self.variant_id, "variant"))


@dataclass(frozen=True)
class IndexedProduct(ValueObject):
    """A fully specified variant prepared for the listing index.

    Attributes:
        number: Variant number.
        full_configuration: Every group of the product with all its options.
        configuration: Every group with only the option this variant selects.
        available_combinations: Dash-joined option ids of every purchasable
            variant of the product (e.g. ``"100-200"``).
    """

    number: str
    full_configuration: tuple[OptionGroup, ...]
    configuration: tuple[OptionGroup, ...]
    available_combinations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "full_configuration", tuple(self.full_configuration))
        object.__setattr__(self, "configuration", tuple(self.configuration))
        object.__setattr__(
            self, "available_combinations", tuple(str(c) for c in self.available_combinations)
        )
