"""Document store access: HTTP client, client registry and repository facade.

Architecture::

    client.py       StoreHostOptions, DocumentStoreClient, ClientRegistry
    documents.py    WriteResult, DocumentMetadata, entity (de)serialisation
    repository.py   DocumentRepository (identity-aware writes, ranged reads)
"""

from docspine.store.client import (
    ClientRegistry,
    DocumentStoreClient,
    StoreHostOptions,
    close_client_registry,
    get_client_registry,
)
from docspine.store.documents import DocumentMetadata, EntityWithMetadata, WriteResult
from docspine.store.repository import DocumentRepository

__all__ = [
    "ClientRegistry",
    "DocumentMetadata",
    "DocumentRepository",
    "DocumentStoreClient",
    "EntityWithMetadata",
    "StoreHostOptions",
    "WriteResult",
    "close_client_registry",
    "get_client_registry",
]
