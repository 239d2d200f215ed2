"""
Generic soft delete aware repository.

One implementation serves every entity type. Reads of soft deletable types
are filtered by ``deleted_at IS NULL``; ``delete`` of such types becomes a
single conditional UPDATE stamping ``deleted_at``. Hard types are removed
physically. ``hard_delete`` always removes the row.

The repository flushes but never commits: the caller's unit of work owns the
transaction, so audit stamps and the primary mutation commit together.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete as sql_delete
from sqlalchemy import func, inspect, select, update
from sqlalchemy.orm import ColumnProperty, Session
from sqlalchemy.sql import Select

from ..config import get_config
from .capabilities import CapabilityRegistry, get_registry
from .exceptions import EntityNotFoundError, InvalidSortError
from .mixins import DELETED_FIELD
from .models import Direction, Page, PageRequest, Sort, clamp_page_size
from .predicates import by_id, conjoin, identity_of, key_attributes, not_deleted

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SoftDeleteRepository(Generic[T]):
    """
    Repository whose reads and deletes honour the soft delete capability.

    Consumers never need to know whether the entity type is soft deletable;
    the capability is looked up (from the registry cache) on every operation.

    Usage:
        books = SoftDeleteRepository(session, Book)
        book = books.save(Book(title="Dune", price=100, author=author))
        books.delete(book.id)          # sets deleted_at
        assert books.find_one(book.id) is None

    Subclasses may bind the entity type as a class attribute:

        class BookRepository(SoftDeleteRepository[Book]):
            entity_type = Book
    """

    entity_type: Type[T]

    def __init__(
        self,
        session: Session,
        entity_type: Optional[Type[T]] = None,
        registry: Optional[CapabilityRegistry] = None,
    ):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy session of the caller's unit of work
            entity_type: Mapped entity class; defaults to the class attribute
            registry: Capability registry; the process-wide one by default

        Raises:
            TypeError: If no entity type is given or bound on the class
        """
        entity_type = entity_type or getattr(type(self), "entity_type", None)
        if entity_type is None:
            raise TypeError(
                f"{type(self).__name__} needs an entity type "
                "(constructor argument or class attribute)"
            )

        self.session = session
        self.entity_type = entity_type
        self.registry = registry or get_registry()
        self._mapper = inspect(entity_type)

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @property
    def soft_deletable(self) -> bool:
        """Whether deletes of this entity type are soft."""
        return self.registry.supports_soft_delete(self.entity_type)

    # ------------------------------------------------------------------ reads

    def find_all(self, sort: Optional[Sort] = None) -> List[T]:
        """
        Return every visible entity.

        Args:
            sort: Optional caller ordering; primary key order otherwise

        Returns:
            Entities, excluding soft deleted ones for soft types
        """
        return self.find_all_by(sort=sort)

    def find_all_by(self, *predicates: Any, sort: Optional[Sort] = None) -> List[T]:
        """
        Return visible entities matching every given predicate.

        Args:
            *predicates: Additional SQLAlchemy boolean clauses
            sort: Optional caller ordering

        Returns:
            Matching entities, excluding soft deleted ones for soft types
        """
        stmt = self._select(*predicates).order_by(*self._ordering(sort))
        return list(self.session.scalars(stmt).all())

    def find_all_paged(self, page_request: PageRequest) -> Page[T]:
        """
        Return one page of visible entities.

        The reported total counts visible rows only.

        Args:
            page_request: Page index, size and ordering

        Returns:
            Page holding at most ``page_request.size`` entities
        """
        config = get_config()
        size = clamp_page_size(
            page_request.size, config.default_page_size, config.max_page_size
        )

        total = self.count()
        stmt = (
            self._select()
            .order_by(*self._ordering(page_request.sort))
            .offset(page_request.page * size)
            .limit(size)
        )
        content = list(self.session.scalars(stmt).all())

        return Page(
            content=content,
            page=page_request.page,
            size=size,
            total_elements=total,
        )

    def find_one(self, entity_id: Any) -> Optional[T]:
        """
        Look up a single visible entity.

        Args:
            entity_id: Scalar, tuple or mapping identifier

        Returns:
            The entity, or None when absent or soft deleted
        """
        stmt = self._select(by_id(self.entity_type, entity_id))
        return self.session.scalars(stmt).first()

    def exists(self, entity_id: Any) -> bool:
        """Check whether a visible entity has this identifier."""
        stmt = select(func.count()).select_from(self.entity_type).where(
            self._visible(by_id(self.entity_type, entity_id))
        )
        return bool(self.session.scalar(stmt))

    def count(self) -> int:
        """Count visible entities."""
        stmt = select(func.count()).select_from(self.entity_type).where(
            self._visible()
        )
        return self.session.scalar(stmt) or 0

    # ----------------------------------------------------------------- writes

    def save(self, entity: T) -> T:
        """
        Insert a new entity or update an existing one.

        Generated keys and audit stamps are populated on return. Integrity
        errors raised by the database propagate unchanged. Changes the caller
        made to ``deleted_at`` are discarded; only ``delete`` writes it.

        Args:
            entity: Entity to persist

        Returns:
            The persistent entity (a merged copy for detached input)

        Raises:
            EntityNotFoundError: If an existing entity has no visible row
                behind it, for instance because it was deleted after the
                caller loaded it
        """
        state = inspect(entity)

        if self._is_new(entity):
            if self.soft_deletable:
                setattr(entity, DELETED_FIELD, None)
            self.session.add(entity)
        else:
            entity_id = identity_of(entity)
            if state.persistent:
                self._discard_deletion_change(entity)
            with self.session.no_autoflush:
                visible = self.exists(entity_id)
            if not visible:
                logger.debug(f"Update of missing {self.entity_name} {entity_id}")
                raise EntityNotFoundError(self.entity_name, entity_id)
            if not state.persistent:
                entity = self.session.merge(entity)
                self._discard_deletion_change(entity)

        self.session.flush()
        logger.debug(f"Saved {self.entity_name} {identity_of(entity)}")
        return entity

    def delete(self, entity_or_id: Any) -> None:
        """
        Logically delete an entity, given the instance or its identifier.

        Soft types get ``deleted_at`` stamped by one conditional UPDATE; hard
        types are removed.

        Raises:
            EntityNotFoundError: If no visible row has this identifier
        """
        if isinstance(entity_or_id, self.entity_type):
            entity_id = identity_of(entity_or_id)
        else:
            entity_id = entity_or_id
        self.delete_by_id(entity_id)

    def delete_by_id(self, entity_id: Any) -> None:
        """
        Logically delete the entity with this identifier.

        For soft types this is one guarded UPDATE, so concurrent deletes
        cannot both succeed. Hard types are looked up first and then removed
        through the session so ORM cascades apply; that is two statements and
        carries no single-statement guarantee.

        Raises:
            EntityNotFoundError: If no visible row has this identifier
        """
        if self.soft_deletable:
            self._soft_delete(entity_id)
            return

        entity = self.find_one(entity_id)
        if entity is None:
            logger.debug(f"Delete of missing {self.entity_name} {entity_id}")
            raise EntityNotFoundError(self.entity_name, entity_id)

        self.session.delete(entity)
        self.session.flush()
        logger.info(f"Deleted {self.entity_name} {entity_id}")

    def hard_delete(self, entity: T) -> None:
        """
        Physically remove an entity regardless of capability or prior soft
        delete. ORM cascades configured on the entity apply.
        """
        state = inspect(entity)
        if not state.persistent:
            self._remove_row(identity_of(entity))
            return

        entity_id = identity_of(entity)
        self.session.delete(entity)
        self.session.flush()
        logger.info(f"Hard deleted {self.entity_name} {entity_id}")

    def hard_delete_by_id(self, entity_id: Any) -> None:
        """
        Physically remove the row with this identifier, visible or not.

        Raises:
            EntityNotFoundError: If the row never existed or is already gone
        """
        if not self._remove_row(entity_id):
            raise EntityNotFoundError(self.entity_name, entity_id)

    # ---------------------------------------------------------------- helpers

    def _visible(self, *predicates: Any) -> Any:
        if self.soft_deletable:
            predicates = predicates + (not_deleted(self.entity_type, self.registry),)
        return conjoin(*predicates)

    def _select(self, *predicates: Any) -> Select[Any]:
        return select(self.entity_type).where(self._visible(*predicates))

    def _ordering(self, sort: Optional[Sort]) -> List[Any]:
        clauses = []
        for order in sort.orders if sort else []:
            prop = self._mapper.attrs.get(order.attribute)
            if not isinstance(prop, ColumnProperty):
                raise InvalidSortError(self.entity_name, order.attribute)
            column = getattr(self.entity_type, order.attribute)
            if order.direction == Direction.DESC:
                clauses.append(column.desc())
            else:
                clauses.append(column.asc())

        # Primary key as tie breaker keeps identical queries stable
        clauses.extend(column.asc() for column in key_attributes(self.entity_type))
        return clauses

    def _is_new(self, entity: T) -> bool:
        state = inspect(entity)
        if state.pending:
            return True
        if not state.transient:
            return False

        key = self._mapper.primary_key_from_instance(entity)
        if any(component is None for component in key):
            return True
        # A supplied key counts as an update only when the database generates keys
        return self._mapper.local_table.autoincrement_column is None

    def _discard_deletion_change(self, entity: T) -> None:
        if not self.soft_deletable:
            return
        if inspect(entity).attrs[DELETED_FIELD].history.has_changes():
            # Reloaded from the row on next access
            self.session.expire(entity, [DELETED_FIELD])

    def _soft_delete(self, entity_id: Any) -> None:
        stmt = (
            update(self.entity_type)
            .where(
                by_id(self.entity_type, entity_id),
                not_deleted(self.entity_type, self.registry),
            )
            .values({DELETED_FIELD: get_config().now()})
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.execute(stmt)

        if result.rowcount == 0:
            logger.debug(f"Soft delete of missing {self.entity_name} {entity_id}")
            raise EntityNotFoundError(self.entity_name, entity_id)

        logger.info(f"Soft deleted {self.entity_name} {entity_id}")

    def _remove_row(self, entity_id: Any) -> bool:
        stmt = (
            sql_delete(self.entity_type)
            .where(by_id(self.entity_type, entity_id))
            .execution_options(synchronize_session="evaluate")
        )
        removed = self.session.execute(stmt).rowcount > 0
        if removed:
            logger.info(f"Hard deleted {self.entity_name} {entity_id}")
        return removed
