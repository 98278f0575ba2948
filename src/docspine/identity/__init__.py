"""Entity identity: declarations, resolution and key composition.

Architecture::

    fields.py      IdentityField, id_field(), routing_field()
    resolver.py    EntityTypeMetadata + IdentityRegistry (memoised per type)
    builder.py     build_primary_key(), build_routing_key(), entity_keys()
"""

from docspine.identity.builder import (
    DEFAULT_DELIMITER,
    EntityKeys,
    build_primary_key,
    build_routing_key,
    entity_keys,
)
from docspine.identity.fields import FieldRole, IdentityField, id_field, routing_field
from docspine.identity.resolver import (
    EntityTypeMetadata,
    IdentityRegistry,
    get_identity_registry,
    register_identity,
    resolve_identity_spec,
)

__all__ = [
    "DEFAULT_DELIMITER",
    "EntityKeys",
    "EntityTypeMetadata",
    "FieldRole",
    "IdentityField",
    "IdentityRegistry",
    "build_primary_key",
    "build_routing_key",
    "entity_keys",
    "get_identity_registry",
    "id_field",
    "register_identity",
    "resolve_identity_spec",
    "routing_field",
]
