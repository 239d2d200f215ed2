"""
Capability registry for soft delete support.

An entity type is soft deletable when its mapped table carries the nullable
``deleted_at`` column. The answer is computed once per type and kept for the
lifetime of the registry; explicit registration overrides inspection.
"""

import logging
import threading
from typing import Dict, Optional, Type

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from .exceptions import CapabilityError
from .mixins import DELETED_FIELD

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Caches, per entity type, whether soft delete semantics apply."""

    def __init__(self) -> None:
        self._capabilities: Dict[type, bool] = {}
        self._lock = threading.Lock()

    def register(self, entity_type: Type[object], soft_deletable: bool) -> None:
        """
        Record the capability of an entity type, overriding inspection.

        A type can only be registered as soft deletable when it maps the
        deletion timestamp; registering any type as hard always succeeds.

        Args:
            entity_type: Mapped entity class
            soft_deletable: Whether deletes of this type are soft

        Raises:
            CapabilityError: If the type is registered as soft deletable but
                has no mapped deletion timestamp
        """
        if soft_deletable and not self._inspect(entity_type):
            raise CapabilityError(getattr(entity_type, "__name__", repr(entity_type)))

        with self._lock:
            self._capabilities[entity_type] = soft_deletable

    def supports_soft_delete(self, entity_type: Type[object]) -> bool:
        """
        Check whether ``entity_type`` declares the deletion timestamp.

        Never raises: a type that cannot be inspected is reported as not
        soft deletable, and the failure is logged once.
        """
        cached = self._capabilities.get(entity_type)
        if cached is not None:
            return cached

        with self._lock:
            if entity_type not in self._capabilities:
                self._capabilities[entity_type] = self._inspect(entity_type)
            return self._capabilities[entity_type]

    def clear(self) -> None:
        """Forget every cached and registered capability."""
        with self._lock:
            self._capabilities.clear()

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._capabilities

    @staticmethod
    def _inspect(entity_type: Type[object]) -> bool:
        name = getattr(entity_type, "__name__", repr(entity_type))
        try:
            mapper = inspect(entity_type)
            return DELETED_FIELD in mapper.columns
        except NoInspectionAvailable:
            logger.warning(
                f"{name} is not a mapped entity; treating it as hard delete only"
            )
        except Exception as e:
            logger.warning(
                f"Capability inspection of {name} failed: {e}; "
                "treating it as hard delete only"
            )
        return False


# Global registry instance
_registry: Optional[CapabilityRegistry] = None


def get_registry() -> CapabilityRegistry:
    """Get the process-wide capability registry."""
    global _registry

    if _registry is None:
        _registry = CapabilityRegistry()

    return _registry


def reset_registry() -> None:
    """Drop the process-wide registry; the next access starts empty."""
    global _registry
    _registry = None


def supports_soft_delete(entity_type: Type[object]) -> bool:
    """Shortcut for ``get_registry().supports_soft_delete(entity_type)``."""
    return get_registry().supports_soft_delete(entity_type)
