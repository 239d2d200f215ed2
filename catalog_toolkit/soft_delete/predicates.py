"""
Composable query predicates.

Each builder returns a SQLAlchemy boolean clause usable in ``select``,
``update`` and ``delete`` statements. Only conjunctions are produced, so
composition is associative and order independent.
"""

from typing import Any, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import ColumnElement, and_, inspect, true

from .capabilities import CapabilityRegistry, get_registry
from .exceptions import CapabilityError, InvalidIdentifierError
from .mixins import DELETED_FIELD


def key_attributes(entity_type: Type[Any]) -> Sequence[Any]:
    """Mapped attributes of the primary key, in key order."""
    mapper = inspect(entity_type)
    return [
        getattr(entity_type, mapper.get_property_by_column(column).key)
        for column in mapper.primary_key
    ]


def _key_components(entity_type: Type[Any], entity_id: Any) -> Tuple[Any, ...]:
    """Normalize a scalar, tuple or mapping identifier to key column order."""
    columns = key_attributes(entity_type)
    name = entity_type.__name__

    if entity_id is None:
        raise InvalidIdentifierError(name, entity_id, "identifier is None")

    if isinstance(entity_id, Mapping):
        try:
            components = tuple(entity_id[column.key] for column in columns)
        except KeyError as e:
            raise InvalidIdentifierError(name, entity_id, f"missing key {e}")
    elif isinstance(entity_id, tuple):
        components = entity_id
    else:
        components = (entity_id,)

    if len(components) != len(columns):
        raise InvalidIdentifierError(
            name,
            entity_id,
            f"expected {len(columns)} key component(s), got {len(components)}",
        )
    if any(component is None for component in components):
        raise InvalidIdentifierError(name, entity_id, "key component is None")

    return components


def by_id(entity_type: Type[Any], entity_id: Any) -> ColumnElement[bool]:
    """
    Match the row whose primary key equals ``entity_id``.

    Args:
        entity_type: Mapped entity class
        entity_id: Scalar for single column keys; tuple (key column order) or
            mapping of column name to value for composite keys

    Returns:
        Conjunction of equality on each key column

    Raises:
        InvalidIdentifierError: If the identifier does not fit the key
    """
    components = _key_components(entity_type, entity_id)
    return conjoin(
        *(
            column == value
            for column, value in zip(key_attributes(entity_type), components)
        )
    )


def not_deleted(
    entity_type: Type[Any], registry: Optional[CapabilityRegistry] = None
) -> ColumnElement[bool]:
    """
    Match rows whose deletion timestamp is null.

    Args:
        entity_type: Mapped entity class
        registry: Registry to consult; the process-wide one by default

    Raises:
        CapabilityError: If the type is not soft deletable
    """
    registry = registry or get_registry()
    if not registry.supports_soft_delete(entity_type):
        raise CapabilityError(entity_type.__name__)
    return getattr(entity_type, DELETED_FIELD).is_(None)


def conjoin(*predicates: ColumnElement[bool]) -> ColumnElement[bool]:
    """Logical AND of ``predicates``; always true when none are given."""
    if not predicates:
        return true()
    if len(predicates) == 1:
        return predicates[0]
    return and_(*predicates)


def identity_of(entity: Any) -> Any:
    """
    Primary key value of an entity instance.

    Returns:
        The scalar value for single column keys, a tuple otherwise. Components
        may be None for entities that were never flushed.
    """
    mapper = inspect(type(entity))
    key = mapper.primary_key_from_instance(entity)
    if len(key) == 1:
        return key[0]
    return tuple(key)
