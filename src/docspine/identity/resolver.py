"""
Resolve an entity type's identity declarations into immutable metadata.

Resolution reads the type's ``__identity__`` declarations (or an explicit
registration), validates them and publishes an :class:`EntityTypeMetadata`
that never changes for the lifetime of the type. The result is memoised in
an :class:`IdentityRegistry`; concurrent first use of a type resolves it
exactly once.

Architecture:
    ::

        entity type ──► IdentityRegistry.resolve()
                           │  cache hit  ──► EntityTypeMetadata
                           │  cache miss ──► lock ──► re-check ──► validate
                           │                                   └─► publish
                           ▼
                  EntityTypeMetadata(id_fields, routing_field)

Validation (fails fast with ConfigurationError):
    - two id fields with the same ``(sequence, name)`` pair
    - more than one routing field
    - declarations that are not ``IdentityField`` instances

Tags:
    identity, registry, memoization, thread-safety, docspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from docspine.core.errors import ConfigurationError
from docspine.core.logging import get_logger
from docspine.identity.fields import FieldRole, IdentityField

logger = get_logger(__name__)

IDENTITY_ATTRIBUTE = "__identity__"


def _type_name(entity_type: type) -> str:
    return f"{entity_type.__module__}.{entity_type.__qualname__}"


@dataclass(frozen=True, slots=True)
class EntityTypeMetadata:
    """
    Identity metadata of one entity type.

    Attributes:
        entity_type: Qualified name of the type
        id_fields: Id field declarations, in declaration order
        routing_field: The routing declaration, if any
    """

    entity_type: str
    id_fields: tuple[IdentityField, ...] = ()
    routing_field: IdentityField | None = None

    @property
    def has_identity(self) -> bool:
        return bool(self.id_fields)

    def ordered_id_fields(self) -> tuple[IdentityField, ...]:
        """Id fields sorted by ``(sequence, name)``; a new tuple every call."""
        return tuple(sorted(self.id_fields, key=lambda f: (f.sequence, f.name)))

    @property
    def id_field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.ordered_id_fields())


def build_metadata(entity_type: type, declarations: Iterable[Any]) -> EntityTypeMetadata:
    """Validate ``declarations`` and build the metadata for ``entity_type``."""
    type_name = _type_name(entity_type)
    id_fields: list[IdentityField] = []
    routing: IdentityField | None = None
    seen: set[tuple[int, str]] = set()

    for declaration in declarations:
        if not isinstance(declaration, IdentityField):
            raise ConfigurationError(
                f"{type_name}.{IDENTITY_ATTRIBUTE} entries must be IdentityField, got {declaration!r}",
                entity_type=type_name,
            )
        if declaration.role is FieldRole.ID:
            key = (declaration.sequence, declaration.name)
            if key in seen:
                raise ConfigurationError(
                    f"{type_name} declares id field {declaration.name!r} "
                    f"with sequence {declaration.sequence} more than once",
                    entity_type=type_name,
                )
            seen.add(key)
            id_fields.append(declaration)
        else:
            if routing is not None:
                raise ConfigurationError(
                    f"{type_name} declares more than one routing field "
                    f"({routing.name!r}, {declaration.name!r})",
                    entity_type=type_name,
                )
            routing = declaration

    return EntityTypeMetadata(entity_type=type_name, id_fields=tuple(id_fields), routing_field=routing)


class IdentityRegistry:
    """
    Thread-safe, memoised ``entity type -> EntityTypeMetadata`` cache.

    Reads of an already resolved type take no lock. A miss takes the lock,
    checks again and resolves, so concurrent first callers all observe the
    same published instance.

    Example:
        registry = IdentityRegistry()
        meta = registry.resolve(Order)
        assert registry.resolve(Order) is meta
    """

    def __init__(self) -> None:
        self._resolved: dict[type, EntityTypeMetadata] = {}
        self._declared: dict[type, tuple[IdentityField, ...]] = {}
        self._lock = threading.Lock()

    def register(self, entity_type: type, *fields: IdentityField) -> EntityTypeMetadata:
        """Declare identity for a type that cannot carry ``__identity__`` itself.

        Validation runs immediately so bad declarations fail at startup.
        Re-registering a type replaces its metadata.
        """
        metadata = build_metadata(entity_type, fields)
        with self._lock:
            self._declared[entity_type] = tuple(fields)
            self._resolved[entity_type] = metadata
        logger.debug(
            "identity_registered",
            entity_type=metadata.entity_type,
            id_fields=metadata.id_field_names,
            routing_field=metadata.routing_field.name if metadata.routing_field else None,
        )
        return metadata

    def resolve(self, entity_type: type) -> EntityTypeMetadata:
        """Return the (cached) metadata for ``entity_type``."""
        metadata = self._resolved.get(entity_type)
        if metadata is not None:
            return metadata

        with self._lock:
            metadata = self._resolved.get(entity_type)
            if metadata is not None:
                return metadata
            declarations = self._declared.get(entity_type)
            if declarations is None:
                declarations = getattr(entity_type, IDENTITY_ATTRIBUTE, ())
            metadata = build_metadata(entity_type, declarations)
            self._resolved[entity_type] = metadata

        logger.debug(
            "identity_resolved",
            entity_type=metadata.entity_type,
            id_fields=metadata.id_field_names,
            routing_field=metadata.routing_field.name if metadata.routing_field else None,
        )
        return metadata

    def clear(self) -> None:
        """Forget every resolved type and registration (primarily for testing)."""
        with self._lock:
            self._resolved.clear()
            self._declared.clear()

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._resolved

    def __len__(self) -> int:
        return len(self._resolved)


_default_registry = IdentityRegistry()


def get_identity_registry() -> IdentityRegistry:
    """The process-wide registry used by the module-level helpers."""
    return _default_registry


def resolve_identity_spec(entity_type: type) -> EntityTypeMetadata:
    """Resolve ``entity_type`` against the process-wide registry."""
    return _default_registry.resolve(entity_type)


def register_identity(entity_type: type, *fields: IdentityField) -> EntityTypeMetadata:
    """Register identity fields for ``entity_type`` in the process-wide registry."""
    return _default_registry.register(entity_type, *fields)


__all__ = [
    "EntityTypeMetadata",
    "IdentityRegistry",
    "build_metadata",
    "get_identity_registry",
    "register_identity",
    "resolve_identity_spec",
]
