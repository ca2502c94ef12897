"""Base classes for the domain layer.

Everything the listing engine computes is derived, request-scoped data,
so the domain only needs immutable value objects.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They are interchangeable when their values are equal.

    Example:
        @dataclass(frozen=True)
        class Currency(ValueObject):
            id: int
            factor: Decimal
    """

    pass
