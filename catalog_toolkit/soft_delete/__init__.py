"""
Soft Delete Module - soft delete aware data access.

Provides column mixins, the capability registry, predicate builders and the
generic repository that hides soft deletion from its consumers.
"""

from .capabilities import (
    CapabilityRegistry,
    get_registry,
    reset_registry,
    supports_soft_delete,
)
from .exceptions import (
    CapabilityError,
    EntityNotFoundError,
    InvalidIdentifierError,
    InvalidSortError,
    SoftDeleteError,
)
from .mixins import AuditMixin, SoftDeleteMixin, acting_as, current_actor
from .models import Direction, Order, Page, PageRequest, Sort
from .predicates import by_id, conjoin, identity_of, not_deleted
from .repository import SoftDeleteRepository

__all__ = [
    # Mixins
    "AuditMixin",
    "SoftDeleteMixin",
    "acting_as",
    "current_actor",
    # Capabilities
    "CapabilityRegistry",
    "get_registry",
    "reset_registry",
    "supports_soft_delete",
    # Predicates
    "by_id",
    "not_deleted",
    "conjoin",
    "identity_of",
    # Repository
    "SoftDeleteRepository",
    # Models
    "Direction",
    "Order",
    "Sort",
    "PageRequest",
    "Page",
    # Exceptions
    "SoftDeleteError",
    "EntityNotFoundError",
    "CapabilityError",
    "InvalidIdentifierError",
    "InvalidSortError",
]
