"""
SQLAlchemy mixins for audit stamping and soft delete columns.

Audit fields are written by mapper events during flush, so callers never
set them. The soft delete mixin only contributes the nullable ``deleted_at``
column; whether a type is soft deletable is decided structurally by
:mod:`catalog_toolkit.soft_delete.capabilities`.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import DateTime, String, event, inspect
from sqlalchemy.orm import Mapped, mapped_column

from ..config import get_config

DELETED_FIELD = "deleted_at"
AUDIT_FIELDS = ("created_at", "created_by", "updated_at")

# Actor recorded as created_by for inserts in the current context
current_actor: ContextVar[Optional[str]] = ContextVar("current_actor", default=None)


@contextmanager
def acting_as(actor: str) -> Iterator[None]:
    """Bind ``actor`` as the creator of rows inserted inside the block."""
    token = current_actor.set(actor)
    try:
        yield
    finally:
        current_actor.reset(token)


class AuditMixin:
    """
    Mixin adding the audit columns every entity carries.

    Usage:
        class Author(Base, AuditMixin):
            __tablename__ = 'm_author'
            id: Mapped[int] = mapped_column(primary_key=True)
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def to_dict(self, include_audit_fields: bool = True) -> Dict[str, Any]:
        """
        Convert the entity to a dictionary of its column values.

        Args:
            include_audit_fields: Whether to include audit and deletion columns

        Returns:
            Dictionary representation of the entity
        """
        result: Dict[str, Any] = {}

        table = getattr(self, "__table__", None)
        if table is None:
            return result

        for column in table.columns:
            if not include_audit_fields and (
                column.name in AUDIT_FIELDS or column.name == DELETED_FIELD
            ):
                continue
            value = getattr(self, column.key, None)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[column.name] = value

        return result


class SoftDeleteMixin:
    """
    Mixin adding the nullable deletion timestamp.

    Rows with a non-null ``deleted_at`` are invisible to every find operation
    of :class:`~catalog_toolkit.soft_delete.repository.SoftDeleteRepository`.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, index=True, default=None
    )


@event.listens_for(AuditMixin, "before_insert", propagate=True)
def _stamp_created(mapper: Any, connection: Any, target: AuditMixin) -> None:
    config = get_config()
    target.created_at = config.now()
    target.created_by = current_actor.get() or config.default_actor
    target.updated_at = None


@event.listens_for(AuditMixin, "before_update", propagate=True)
def _stamp_updated(mapper: Any, connection: Any, target: AuditMixin) -> None:
    state = inspect(target)
    # Creation fields keep their stored values
    for name in ("created_at", "created_by"):
        history = state.attrs[name].history
        if history.added and history.deleted:
            setattr(target, name, history.deleted[0])
    target.updated_at = get_config().now()
