"""
HTTP client for the document store and the registry that owns client instances.

:class:`DocumentStoreClient` speaks the store's REST API through
``httpx``: one method per document/index operation the repository needs,
returning decoded JSON bodies. Non-success statuses become typed
:class:`~docspine.core.errors.StoreError` subclasses so callers can tell a
rejected request from an overloaded cluster.

:class:`ClientRegistry` replaces an implicit process-global client map: it
is created at process start, hands out one client per distinct host
configuration, and closes them all at shutdown.

Architecture:
    ::

        DocumentRepository ──► ClientRegistry.get(options)
                                   │  one client per options.cache_key()
                                   ▼
                            DocumentStoreClient ──► httpx.Client ──► node 1..n
                                                     (round-robin)

        status 2xx        → decoded body
        status in ignore  → None
        status 429 / 5xx  → StoreUnavailableError   (retryable)
        other statuses    → StoreRequestError
        transport failure → StoreConnectionError    (retryable)

Examples:
    >>> registry = ClientRegistry()
    >>> client = registry.get(StoreHostOptions(nodes=["http://localhost:9200"]))
    >>> client.get("orders_2019.06", "s1-42")
    >>> registry.close_all()

Tags:
    document-store, http, httpx, client, registry, docspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from docspine.core.errors import StoreConnectionError, StoreRequestError, StoreUnavailableError
from docspine.core.logging import get_logger

logger = get_logger(__name__)

IndexTarget = str | Sequence[str]


class StoreHostOptions(BaseModel):
    """Connection options for one store cluster."""

    model_config = ConfigDict(frozen=True)

    nodes: list[str] = Field(min_length=1)
    request_timeout: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)

    def cache_key(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_settings(cls, settings: Any) -> StoreHostOptions:
        return cls(nodes=list(settings.store_nodes), request_timeout=settings.store_request_timeout)


def _index_path(index: IndexTarget) -> str:
    if isinstance(index, str):
        return quote(index, safe=",*")
    return ",".join(quote(name, safe="*") for name in index)


def _doc_id(document_id: str) -> str:
    return quote(document_id, safe="")


def _source_param(source: Iterable[str] | None) -> str | None:
    if source is None:
        return None
    return ",".join(source)


class DocumentStoreClient:
    """Thin synchronous client over the store's REST API."""

    def __init__(self, options: StoreHostOptions, *, transport: httpx.BaseTransport | None = None):
        self.options = options
        self._nodes = itertools.cycle([node.rstrip("/") for node in options.nodes])
        self._node_lock = threading.Lock()
        self._http = httpx.Client(
            timeout=options.request_timeout,
            headers=options.headers,
            transport=transport,
        )

    def _next_node(self) -> str:
        with self._node_lock:
            return next(self._nodes)

    # -- Transport -----------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        ignore: Iterable[int] = (),
    ) -> dict[str, Any] | None:
        """Send one request; return the decoded body, or ``None`` for an ignored status."""
        url = f"{self._next_node()}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug("store_request", method=method, url=url, params=query or None)

        try:
            response = self._http.request(method, url, params=query, json=json)
        except httpx.TransportError as exc:
            logger.warning("store_unreachable", method=method, url=url, error=str(exc))
            raise StoreConnectionError(f"{method} {url} failed: {exc}", cause=exc).with_context(url=url) from exc

        if response.status_code in set(ignore):
            return None
        if response.is_success:
            return response.json() if response.content else {}
        raise self._error_for(method, url, response)

    @staticmethod
    def _error_for(method: str, url: str, response: httpx.Response) -> StoreRequestError:
        error_type = reason = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("error")
            if isinstance(detail, dict):
                error_type = detail.get("type")
                reason = detail.get("reason")
            elif isinstance(detail, str):
                reason = detail

        status = response.status_code
        cls = StoreUnavailableError if status == 429 or status >= 500 else StoreRequestError
        logger.warning(
            "store_request_failed",
            method=method,
            url=url,
            status=status,
            error_type=error_type,
            reason=reason,
        )
        error = cls(
            f"{method} {url} returned {status}" + (f": {error_type} - {reason}" if reason else ""),
            status=status,
            error_type=error_type,
            reason=reason,
        )
        error.with_context(url=url)
        return error

    # -- Documents -----------------------------------------------------

    def create(
        self, index: str, document_id: str, document: Mapping[str, Any], *, routing: str | None = None
    ) -> dict[str, Any]:
        return self.request(
            "PUT", f"{_index_path(index)}/_create/{_doc_id(document_id)}", params={"routing": routing}, json=document
        )

    def index(
        self,
        index: str,
        document: Mapping[str, Any],
        *,
        document_id: str | None = None,
        routing: str | None = None,
    ) -> dict[str, Any]:
        if document_id is None:
            return self.request("POST", f"{_index_path(index)}/_doc", params={"routing": routing}, json=document)
        return self.request(
            "PUT", f"{_index_path(index)}/_doc/{_doc_id(document_id)}", params={"routing": routing}, json=document
        )

    def get(
        self,
        index: str,
        document_id: str,
        *,
        source: Iterable[str] | None = None,
        routing: str | None = None,
    ) -> dict[str, Any] | None:
        """Fetch one document; ``None`` when it (or the index) does not exist."""
        body = self.request(
            "GET",
            f"{_index_path(index)}/_doc/{_doc_id(document_id)}",
            params={"_source": _source_param(source), "routing": routing},
            ignore=(404,),
        )
        if not body or not body.get("found"):
            return None
        return body

    def mget(
        self, index: IndexTarget, docs: Sequence[Mapping[str, Any]], *, source: Iterable[str] | None = None
    ) -> list[dict[str, Any]]:
        body = self.request(
            "POST", f"{_index_path(index)}/_mget", params={"_source": _source_param(source)}, json={"docs": list(docs)}
        )
        return list(body.get("docs", []))

    def update(
        self,
        index: str,
        document_id: str,
        body: Mapping[str, Any],
        *,
        routing: str | None = None,
        retry_on_conflict: int | None = None,
    ) -> dict[str, Any]:
        return self.request(
            "POST",
            f"{_index_path(index)}/_update/{_doc_id(document_id)}",
            params={"routing": routing, "retry_on_conflict": retry_on_conflict},
            json=body,
        )

    def delete(self, index: str, document_id: str, *, routing: str | None = None) -> dict[str, Any]:
        return self.request(
            "DELETE", f"{_index_path(index)}/_doc/{_doc_id(document_id)}", params={"routing": routing}
        )

    # -- Indices -------------------------------------------------------

    def refresh(self, index: IndexTarget, *, ignore_unavailable: bool = True) -> dict[str, Any]:
        return self.request(
            "POST",
            f"{_index_path(index)}/_refresh",
            params={"ignore_unavailable": str(ignore_unavailable).lower()},
        )

    def put_settings(self, index: IndexTarget, settings: Mapping[str, Any]) -> dict[str, Any]:
        return self.request("PUT", f"{_index_path(index)}/_settings", json=dict(settings))

    def forcemerge(
        self, index: IndexTarget, *, max_num_segments: int = 5, ignore_unavailable: bool = True
    ) -> dict[str, Any]:
        return self.request(
            "POST",
            f"{_index_path(index)}/_forcemerge",
            params={
                "max_num_segments": max_num_segments,
                "ignore_unavailable": str(ignore_unavailable).lower(),
            },
        )

    # -- Lifecycle -----------------------------------------------------

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> DocumentStoreClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


ClientFactory = Callable[[StoreHostOptions], DocumentStoreClient]


class ClientRegistry:
    """
    Owns store clients for the lifetime of the process.

    One client per distinct :class:`StoreHostOptions`; create the registry
    at startup and call :meth:`close_all` (or leave its ``with`` block) at
    shutdown.
    """

    def __init__(self, factory: ClientFactory | None = None):
        self._factory: ClientFactory = factory or DocumentStoreClient
        self._clients: dict[str, DocumentStoreClient] = {}
        self._lock = threading.Lock()

    def get(self, options: StoreHostOptions) -> DocumentStoreClient:
        key = options.cache_key()
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self._factory(options)
                self._clients[key] = client
                logger.debug("store_client_created", nodes=options.nodes)
            return client

    def close_all(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()
        logger.debug("store_clients_closed", count=len(clients))

    def __len__(self) -> int:
        return len(self._clients)

    def __enter__(self) -> ClientRegistry:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close_all()


_default_registry: ClientRegistry | None = None
_default_registry_lock = threading.Lock()


def get_client_registry() -> ClientRegistry:
    """Process-wide registry, created on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = ClientRegistry()
        return _default_registry


def close_client_registry() -> None:
    """Close every client of the process-wide registry (call at shutdown)."""
    global _default_registry
    with _default_registry_lock:
        registry, _default_registry = _default_registry, None
    if registry is not None:
        registry.close_all()


__all__ = [
    "ClientRegistry",
    "DocumentStoreClient",
    "StoreHostOptions",
    "close_client_registry",
    "get_client_registry",
]
