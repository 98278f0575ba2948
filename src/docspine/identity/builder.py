"""
Compose primary and routing keys from an entity instance.

The primary key joins the entity's id field values, ordered by
``(sequence, name)``, with a delimiter. It is recomputed on every write so
it always reflects the current field values.

Composition rules:
    - no id fields declared      → ``None`` (the store assigns an id)
    - one id field ``x="v"``     → ``"v"``
    - ``a(seq=1)="a", b(seq=0)="b"`` → ``"b-a"``
    - a ``None`` value           → empty segment, delimiter kept
      (``"-a"`` when ``b`` is ``None``). Every value ``None`` yields a key of
      bare delimiters; keys already stored in that shape stay addressable.
      ``strict=True`` raises ``IncompleteIdentityError`` instead.

Examples:
    >>> meta = resolve_identity_spec(Order)
    >>> build_primary_key(meta, Order(shop_id="s1", order_no=42))
    's1-42'
    >>> build_routing_key(meta, Order(shop_id="s1", order_no=42))
    's1'

Tags:
    identity, primary-key, routing, docspine
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from docspine.core.errors import IncompleteIdentityError
from docspine.identity.resolver import EntityTypeMetadata, resolve_identity_spec

DEFAULT_DELIMITER = "-"


def _segment(value: Any) -> str:
    return "" if value is None else str(value)


def build_primary_key(
    metadata: EntityTypeMetadata,
    entity: Any,
    delimiter: str = DEFAULT_DELIMITER,
    *,
    strict: bool = False,
) -> str | None:
    """Return the primary key of ``entity``, or ``None`` if its type has no id fields."""
    if not metadata.id_fields:
        return None

    ordered = metadata.ordered_id_fields()
    values = [field.read(entity) for field in ordered]

    if strict and all(value is None for value in values):
        raise IncompleteIdentityError(metadata.entity_type, tuple(f.name for f in ordered))

    return delimiter.join(_segment(value) for value in values)


def build_routing_key(metadata: EntityTypeMetadata, entity: Any) -> str | None:
    """Return the routing key of ``entity``; ``None`` if undeclared or unset."""
    if metadata.routing_field is None:
        return None
    value = metadata.routing_field.read(entity)
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True, slots=True)
class EntityKeys:
    primary_key: str | None
    routing_key: str | None


def entity_keys(entity: Any, delimiter: str = DEFAULT_DELIMITER, *, strict: bool = False) -> EntityKeys:
    """Resolve ``type(entity)`` and build both keys in one call."""
    metadata = resolve_identity_spec(type(entity))
    return EntityKeys(
        primary_key=build_primary_key(metadata, entity, delimiter, strict=strict),
        routing_key=build_routing_key(metadata, entity),
    )


__all__ = [
    "DEFAULT_DELIMITER",
    "EntityKeys",
    "build_primary_key",
    "build_routing_key",
    "entity_keys",
]
