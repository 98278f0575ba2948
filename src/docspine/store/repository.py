"""Base repository for time-partitioned document indices.

Provides :class:`DocumentRepository` -- the facade domain repositories
extend. Every write derives the document id and routing from the entity's
identity declarations; every time-ranged read resolves its target indices
from the index family prefix and partition granularity. Everything else is
a pass-through to :class:`~docspine.store.client.DocumentStoreClient`.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       DocumentRepository                           │
    │                                                                    │
    │   client: DocumentStoreClient   ← ClientRegistry.get(options)      │
    │   settings: DocSpineSettings    ← delimiter, offset, token limit   │
    │                                                                    │
    │   write path:  entity ─► entity_id / routing_id ─► create / index  │
    │   read path:   range  ─► indexes_by_time_range  ─► get / mget      │
    └────────────────────────────────────────────────────────────────────┘

Usage:
    >>> class OrderRepository(DocumentRepository):
    ...     prefix = "orders_"
    ...
    ...     def save(self, order: Order) -> WriteResult:
    ...         index = self.period_index_name(self.prefix, order.created_at, Granularity.MONTHLY)
    ...         return self.index_entity(order, index)
    ...
    ...     def search_target(self, start: int, end: int) -> str:
    ...         return self.index_selector_by_time_range(self.prefix, start, end, Granularity.MONTHLY)

Tags:
    repository, document-store, facade, identity, index-selection
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import tzinfo
from typing import Any, TypeVar

from docspine.core.errors import MissingIdentityError
from docspine.core.logging import get_logger
from docspine.core.settings import DocSpineSettings, get_settings
from docspine.identity.builder import build_primary_key, build_routing_key
from docspine.identity.resolver import EntityTypeMetadata, IdentityRegistry, get_identity_registry
from docspine.indexing.granularity import Granularity
from docspine.indexing.periods import Moment, period_index_name, reference_timezone
from docspine.indexing.selectors import select_indices
from docspine.store.client import ClientRegistry, DocumentStoreClient, IndexTarget, StoreHostOptions, get_client_registry
from docspine.store.documents import DocumentMetadata, EntityWithMetadata, WriteResult, from_document, to_document

logger = get_logger(__name__)

T = TypeVar("T")

MultiGetId = str | Mapping[str, Any]


def _mget_docs(ids: Iterable[MultiGetId]) -> list[dict[str, Any]]:
    """Normalise ids: plain strings become ``{"_id": ...}``; dicts pass through."""
    return [{"_id": item} if isinstance(item, str) else dict(item) for item in ids]


class DocumentRepository:
    """Identity- and partition-aware base class for document repositories.

    Parameters:
        client: Store client to use.  When omitted, one is taken from
                ``registry`` for ``options`` (or :meth:`default_store_options`).
        options: Host options for the registry lookup.
        registry: Client registry; defaults to the process-wide one.
        settings: docspine settings; defaults to :func:`get_settings`.
        identity_registry: Identity metadata cache; defaults to the process-wide one.
    """

    def __init__(
        self,
        client: DocumentStoreClient | None = None,
        *,
        options: StoreHostOptions | None = None,
        registry: ClientRegistry | None = None,
        settings: DocSpineSettings | None = None,
        identity_registry: IdentityRegistry | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.identities = identity_registry or get_identity_registry()
        if client is None:
            registry = registry or get_client_registry()
            client = registry.get(options or self.default_store_options())
        self.client = client

    def default_store_options(self) -> StoreHostOptions:
        """Store the repository talks to when no options are given; override per repository."""
        return StoreHostOptions.from_settings(self.settings)

    @property
    def reference_tz(self) -> tzinfo:
        return reference_timezone(self.settings.utc_offset_hours)

    # -- Identity ------------------------------------------------------

    def identity_of(self, entity: Any) -> EntityTypeMetadata:
        return self.identities.resolve(type(entity))

    def entity_id(self, entity: Any, delimiter: str | None = None) -> str | None:
        """Primary key of ``entity``; ``None`` when its type declares no id fields."""
        return build_primary_key(
            self.identity_of(entity),
            entity,
            delimiter if delimiter is not None else self.settings.id_delimiter,
            strict=self.settings.strict_identity,
        )

    def routing_id(self, entity: Any) -> str | None:
        return build_routing_key(self.identity_of(entity), entity)

    # -- Writes --------------------------------------------------------

    def create_entity(self, entity: Any, index: str) -> WriteResult:
        """Create a new document; fails if a document with the same id exists."""
        document_id = self.entity_id(entity)
        if not document_id:
            raise MissingIdentityError(self.identity_of(entity).entity_type).with_context(index=index)

        body = self.client.create(
            index, document_id, to_document(entity), routing=self.routing_id(entity) or None
        )
        return WriteResult.from_response(body)

    def index_entity(self, entity: Any, index: str) -> WriteResult:
        """Create or replace a document; the store assigns an id when the type declares none."""
        document_id = self.entity_id(entity)
        if document_id is None:
            logger.debug("store_assigned_id", entity_type=self.identity_of(entity).entity_type, index=index)
        body = self.client.index(
            index,
            to_document(entity),
            document_id=document_id,
            routing=self.routing_id(entity) or None,
        )
        return WriteResult.from_response(body)

    def upsert_entity(self, document_id: str, entity: Any, index: str, routing: str | None = None) -> WriteResult:
        body = self.client.update(
            index,
            document_id,
            {"doc": to_document(entity), "doc_as_upsert": True},
            routing=routing,
        )
        return WriteResult.from_response(body)

    def update_entity(self, document_id: str, entity: Any, index: str, routing: str | None = None) -> WriteResult:
        body = self.client.update(
            index,
            document_id,
            {"doc": to_document(entity)},
            routing=routing,
            retry_on_conflict=3,
        )
        return WriteResult.from_response(body)

    def delete_entity(self, document_id: str, index: str, routing: str | None = None) -> WriteResult:
        return WriteResult.from_response(self.client.delete(index, document_id, routing=routing))

    # -- Reads ---------------------------------------------------------

    def get_entity(
        self,
        entity_class: type[T],
        document_id: str,
        index: str,
        *,
        source: Sequence[str] | None = None,
        routing: str | None = None,
    ) -> T | None:
        found = self.get_entity_with_metadata(entity_class, document_id, index, source=source, routing=routing)
        return found.entity if found else None

    def get_entity_with_metadata(
        self,
        entity_class: type[T],
        document_id: str,
        index: str,
        *,
        source: Sequence[str] | None = None,
        routing: str | None = None,
    ) -> EntityWithMetadata[T] | None:
        doc = self.client.get(index, document_id, source=source, routing=routing)
        if doc is None:
            return None
        return EntityWithMetadata(
            entity=from_document(entity_class, doc.get("_source", {})),
            metadata=DocumentMetadata.from_hit(doc),
        )

    def get_entities_with_metadata(
        self,
        entity_class: type[T],
        ids: Iterable[MultiGetId],
        index: IndexTarget,
        *,
        source: Sequence[str] | None = None,
    ) -> list[EntityWithMetadata[T]]:
        """Multi-get; missing documents are skipped, order follows ``ids``."""
        docs = self.client.mget(index, _mget_docs(ids), source=source)
        return [
            EntityWithMetadata(
                entity=from_document(entity_class, doc["_source"]),
                metadata=DocumentMetadata.from_hit(doc),
            )
            for doc in docs
            if doc.get("_source") is not None
        ]

    def get_entities(
        self,
        entity_class: type[T],
        ids: Iterable[MultiGetId],
        index: IndexTarget,
        *,
        source: Sequence[str] | None = None,
    ) -> list[T]:
        return [found.entity for found in self.get_entities_with_metadata(entity_class, ids, index, source=source)]

    def get_entity_map(
        self,
        entity_class: type[T],
        ids: Iterable[MultiGetId],
        index: IndexTarget,
        *,
        source: Sequence[str] | None = None,
    ) -> dict[str, T]:
        """Multi-get keyed by document id."""
        return {
            found.metadata.id: found.entity
            for found in self.get_entities_with_metadata(entity_class, ids, index, source=source)
        }

    # -- Index maintenance ---------------------------------------------

    def refresh(self, index: IndexTarget) -> None:
        self.client.refresh(index)

    def disable_refresh(self, index: IndexTarget) -> None:
        self.client.put_settings(index, {"refresh_interval": -1})

    def enable_refresh(self, index: IndexTarget, interval_seconds: int = 1) -> None:
        self.client.put_settings(index, {"refresh_interval": f"{interval_seconds}s"})

    def force_merge(self, index: IndexTarget, max_num_segments: int = 5) -> None:
        self.client.forcemerge(index, max_num_segments=max_num_segments)

    # -- Index selection -----------------------------------------------

    def indexes_by_time_range(
        self,
        prefix: str,
        start_at: Moment,
        end_at: Moment,
        granularity: Granularity | str,
        enable_group_select: bool | None = None,
    ) -> list[str]:
        """Indices of the ``prefix`` family touched by ``[start_at, end_at]``."""
        selector = select_indices(
            prefix,
            start_at,
            end_at,
            granularity,
            enable_group_select=(
                self.settings.enable_group_select if enable_group_select is None else enable_group_select
            ),
            max_tokens=self.settings.max_selector_tokens,
            tz=self.reference_tz,
        )
        return list(selector.tokens)

    def index_selector_by_time_range(
        self,
        prefix: str,
        start_at: Moment,
        end_at: Moment,
        granularity: Granularity | str,
        enable_group_select: bool | None = None,
    ) -> str:
        return ",".join(self.indexes_by_time_range(prefix, start_at, end_at, granularity, enable_group_select))

    def period_index_name(self, prefix: str, timestamp: Moment, granularity: Granularity | str) -> str:
        """Index a document stamped ``timestamp`` is written to."""
        return period_index_name(prefix, timestamp, granularity, tz=self.reference_tz)


__all__ = ["DocumentRepository", "MultiGetId"]
