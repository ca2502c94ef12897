"""Domain exceptions.

Configuration errors signal malformed catalog data handed to the engine
(non-integral identifiers, groups without options, broken subset keys).
Catalog errors signal that a collaborator was asked for something it does
not know about. Missing prices or availability are never errors: they are
represented by omission.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(DomainError):
    """Base class for fatal catalog configuration errors."""

    pass


class InvalidIdentifierError(ConfigurationError):
    """Raised when an option, group or variant identifier is not an integer."""

    def __init__(self, field: str, value: Any) -> None:
        """Initialize invalid identifier error.

        Args:
            field: Name of the identifier being parsed.
            value: The rejected raw value.
        """
        super().__init__(
            f"Invalid {field} identifier: {value!r} is not an integer",
            details={"field": field, "value": repr(value)},
        )


class InvalidGroupSubsetError(ConfigurationError):
    """Raised when a group subset is empty or its key cannot be parsed."""

    def __init__(self, key: str, reason: str) -> None:
        """Initialize invalid group subset error.

        Args:
            key: The offending subset key or description.
            reason: Why the subset was rejected.
        """
        super().__init__(
            f"Invalid group subset {key!r}: {reason}",
            details={"key": key, "reason": reason},
        )


class EmptyOptionGroupError(ConfigurationError):
    """Raised when a group without options is asked for its baseline option."""

    def __init__(self, group_id: int) -> None:
        """Initialize empty option group error.

        Args:
            group_id: ID of the group without options.
        """
        super().__init__(
            f"Option group {group_id} has no options",
            details={"group_id": group_id},
        )


class OptionGroupMismatchError(ConfigurationError):
    """Raised when an option is attached to a group it does not belong to."""

    def __init__(self, option_id: int, option_group_id: int, group_id: int) -> None:
        """Initialize option group mismatch error.

        Args:
            option_id: ID of the misplaced option.
            option_group_id: Group the option declares.
            group_id: Group the option was attached to.
        """
        super().__init__(
            f"Option {option_id} belongs to group {option_group_id}, "
            f"not to group {group_id}",
            details={
                "option_id": option_id,
                "option_group_id": option_group_id,
                "group_id": group_id,
            },
        )


class UnknownGroupError(ConfigurationError):
    """Raised when a subset references a group missing from the configuration."""

    def __init__(self, group_id: int) -> None:
        """Initialize unknown group error.

        Args:
            group_id: The unknown group ID.
        """
        super().__init__(
            f"Group {group_id} is not part of the product configuration",
            details={"group_id": group_id},
        )


class TooManyGroupsError(ConfigurationError):
    """Raised when enumerating subsets would exceed the configured group ceiling."""

    def __init__(self, group_count: int, limit: int) -> None:
        """Initialize too many groups error.

        Args:
            group_count: Number of groups requested.
            limit: Maximum number of groups allowed.
        """
        super().__init__(
            f"Cannot enumerate combinations of {group_count} groups (limit is {limit})",
            details={"group_count": group_count, "limit": limit},
        )


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for errors raised by catalog collaborators."""

    pass


class UnknownReferenceError(CatalogError):
    """Raised when a shop, currency or customer group cannot be resolved."""

    def __init__(self, entity_type: str, reference: Any) -> None:
        """Initialize unknown reference error.

        Args:
            entity_type: Kind of entity (e.g., "Shop", "Currency").
            reference: The unresolved identifier or key.
        """
        super().__init__(
            f"{entity_type} {reference!r} not found",
            details={"entity_type": entity_type, "reference": str(reference)},
        )
