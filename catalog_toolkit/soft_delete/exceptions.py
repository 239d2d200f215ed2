"""Exceptions for soft delete aware data access."""

from typing import Any, Optional


class SoftDeleteError(Exception):
    """Base exception for repository operations."""

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message)


class EntityNotFoundError(SoftDeleteError):
    """Raised when no currently visible row matches an identifier.

    A row that never existed and a row that was soft deleted are reported
    the same way.
    """

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"No {entity_type} entity with id {entity_id} exists",
            entity_type=entity_type,
            entity_id=entity_id,
        )


class CapabilityError(SoftDeleteError):
    """Raised when a soft delete only operation targets a hard type."""

    def __init__(self, entity_type: str):
        super().__init__(
            f"{entity_type} does not support soft delete",
            entity_type=entity_type,
        )


class InvalidIdentifierError(SoftDeleteError, ValueError):
    """Raised when an identifier does not match the entity's primary key."""

    def __init__(self, entity_type: str, entity_id: Any, reason: str):
        super().__init__(
            f"Invalid identifier {entity_id!r} for {entity_type}: {reason}",
            entity_type=entity_type,
            entity_id=entity_id,
        )


class InvalidSortError(SoftDeleteError, ValueError):
    """Raised when a sort order names an unknown property."""

    def __init__(self, entity_type: str, property_name: str):
        self.property_name = property_name
        super().__init__(
            f"{entity_type} has no sortable property '{property_name}'",
            entity_type=entity_type,
        )
