"""
Declarative identity fields for entity types.

An entity type states which of its fields make up its primary key and
which field pins documents to a shard. The declaration is plain data
attached to the class, read once when the type is first resolved.

Manifesto:
    Identity must be derivable from the entity itself so that writing the
    same entity twice overwrites one document instead of creating two.
    Declaring identity next to the fields (rather than building ids by hand
    at every write site) keeps the composition rule in one place.

    - **Explicit accessors:** Stored attributes and computed properties are
      read the same way, through an accessor callable
    - **Data, not reflection:** ``__identity__`` is a tuple of value objects
    - **Two roles:** ``ID`` fields compose the primary key, the single
      ``ROUTING`` field becomes the routing key

Examples:
    >>> from pydantic import BaseModel
    >>> class Order(BaseModel):
    ...     __identity__ = (
    ...         id_field("shop_id", sequence=0),
    ...         id_field("order_no", sequence=1),
    ...         routing_field("shop_id"),
    ...     )
    ...     shop_id: str
    ...     order_no: int

    Computed identity:

    >>> class Visit(BaseModel):
    ...     __identity__ = (id_field("visit_key", accessor=lambda v: f"{v.day}:{v.user}"),)
    ...     day: str
    ...     user: str

Tags:
    identity, entity, primary-key, routing, declarative, docspine

Doc-Types:
    - API Reference
    - Entity Modelling Guide
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

Accessor = Callable[[Any], Any]


class FieldRole(str, Enum):
    """Role an identity field plays in document addressing."""

    ID = "id"
    ROUTING = "routing"


def read_field(entity: Any, name: str) -> Any:
    """Default accessor: attribute (or mapping key) ``name``, ``None`` when absent."""
    if isinstance(entity, Mapping):
        return entity.get(name)
    return getattr(entity, name, None)


@dataclass(frozen=True, slots=True)
class IdentityField:
    """
    One identity declaration on an entity type.

    Attributes:
        name: Field name; also the tie-breaker when sequences are equal
        role: ``FieldRole.ID`` or ``FieldRole.ROUTING``
        sequence: Position in the primary key (ascending); ignored for routing
        accessor: Optional ``entity -> value`` callable; defaults to reading
            the attribute ``name``
    """

    name: str
    role: FieldRole
    sequence: int = 0
    accessor: Accessor | None = None

    def read(self, entity: Any) -> Any:
        if self.accessor is not None:
            return self.accessor(entity)
        return read_field(entity, self.name)


def id_field(name: str, *, sequence: int = 0, accessor: Accessor | None = None) -> IdentityField:
    """Declare ``name`` as part of the primary key."""
    return IdentityField(name=name, role=FieldRole.ID, sequence=sequence, accessor=accessor)


def routing_field(name: str, *, accessor: Accessor | None = None) -> IdentityField:
    """Declare ``name`` as the routing key."""
    return IdentityField(name=name, role=FieldRole.ROUTING, accessor=accessor)


__all__ = [
    "Accessor",
    "FieldRole",
    "IdentityField",
    "id_field",
    "read_field",
    "routing_field",
]
