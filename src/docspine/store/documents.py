"""
Document value objects and entity (de)serialisation for the store layer.

Entities are pydantic models, dataclasses or plain mappings. Pydantic
models control their stored shape with the usual field options, e.g.
``Field(exclude=True)`` keeps an id-only field out of ``_source``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def to_document(entity: Any) -> dict[str, Any]:
    """Serialise ``entity`` into a JSON-ready ``_source`` body."""
    if isinstance(entity, BaseModel):
        return entity.model_dump(mode="json")
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        return dataclasses.asdict(entity)
    if isinstance(entity, Mapping):
        return dict(entity)
    raise TypeError(f"Cannot serialise {type(entity).__name__}; use a pydantic model, dataclass or mapping")


def from_document(entity_class: type[T], source: Mapping[str, Any]) -> T:
    """Build an ``entity_class`` instance from a stored ``_source``."""
    if isinstance(entity_class, type) and issubclass(entity_class, BaseModel):
        return entity_class.model_validate(dict(source))  # type: ignore[return-value]
    if dataclasses.is_dataclass(entity_class):
        names = {f.name for f in dataclasses.fields(entity_class) if f.init}
        return entity_class(**{k: v for k, v in source.items() if k in names})
    return entity_class(**source)


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    id: str
    index: str
    routing: str | None = None

    @classmethod
    def from_hit(cls, hit: Mapping[str, Any]) -> DocumentMetadata:
        return cls(id=hit["_id"], index=hit["_index"], routing=hit.get("_routing"))


@dataclass(frozen=True)
class EntityWithMetadata(Generic[T]):
    entity: T
    metadata: DocumentMetadata


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of a single-document write (``created``, ``updated``, ``deleted``, ``noop``)."""

    index: str
    id: str
    result: str
    version: int | None = None
    seq_no: int | None = None
    primary_term: int | None = None

    @classmethod
    def from_response(cls, body: Mapping[str, Any]) -> WriteResult:
        return cls(
            index=body.get("_index", ""),
            id=body.get("_id", ""),
            result=body.get("result", ""),
            version=body.get("_version"),
            seq_no=body.get("_seq_no"),
            primary_term=body.get("_primary_term"),
        )


__all__ = [
    "DocumentMetadata",
    "EntityWithMetadata",
    "WriteResult",
    "from_document",
    "to_document",
]
