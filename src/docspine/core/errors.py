"""
Structured error types for docspine.

Every failure raised by docspine carries a category, a retry flag and
structured context so the repository layer and its callers can decide
whether to retry, alert or fail fast without string-matching messages.

Manifesto:
    The identity and index-selection core is pure computation: it never
    retries and never leaves partial state. Its errors are immediate and
    final. Store errors are the only place retry semantics matter, and
    there the error type alone tells the caller what to do.

    - **Typed hierarchy:** One subclass per failure condition
    - **Explicit retry semantics:** ``retryable`` set by the error type
    - **Rich context:** ``ErrorContext`` travels with the error into logs
    - **Error chaining:** Original exceptions preserved as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                       DocSpineError                           │
        │  (category, retryable, context, cause)                        │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigurationError      InvalidRangeError                    │
        │  (CONFIG)                UnsupportedGranularityError          │
        │                          (VALIDATION, also ValueError)        │
        │                                                               │
        │  IdentityError           StoreError                           │
        │  (IDENTITY)              (STORE)                              │
        │       │                       │                               │
        │  IncompleteIdentityError StoreRequestError                    │
        │  MissingIdentityError    StoreUnavailableError (retryable)    │
        │                          StoreConnectionError  (retryable)    │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidRangeError(start_at=200, end_at=100)
    >>> error.retryable
    False
    >>> error.to_dict()["category"]
    'VALIDATION'

    >>> error = StoreUnavailableError("cluster busy", status=429)
    >>> is_retryable(error)
    True

Tags:
    error-handling, exception-hierarchy, retry-logic, docspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification, logging and alert routing."""

    CONFIG = "CONFIG"             # Entity identity declarations, settings
    VALIDATION = "VALIDATION"     # Bad time range, unknown granularity
    IDENTITY = "IDENTITY"         # Entity cannot produce a usable key
    STORE = "STORE"               # Document store rejected a request
    NETWORK = "NETWORK"           # Store unreachable
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what docspine knows at the raise site (entity type,
    index, document id, HTTP details); anything else goes in ``metadata``.
    ``to_dict()`` drops unset fields so log lines stay small.

    Attributes:
        entity_type: Qualified name of the entity class involved
        index: Index name or selector the operation targeted
        document_id: Primary key of the document
        url: Store URL that was being accessed
        http_status: HTTP status code returned by the store
        metadata: Additional key-value pairs
    """

    entity_type: str | None = None
    index: str | None = None
    document_id: str | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def typed_fields(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "metadata")

    def to_dict(self) -> dict[str, Any]:
        """Set fields only, metadata flattened in."""
        typed = {name: getattr(self, name) for name in self.typed_fields()}
        return {**{k: v for k, v in typed.items() if v is not None}, **self.metadata}


class DocSpineError(Exception):
    """
    Base exception for all docspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so the
    raise site only supplies the message and whatever context it has.

    Examples:
        >>> error = DocSpineError("unexpected", category=ErrorCategory.INTERNAL)
        >>> error.with_context(index="logs_2019.06.22").context.index
        'logs_2019.06.22'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreRequestError("rejected", status=400).with_context(
                index="orders_2019.06",
                document_id="shop-1-42",
            )
        """
        typed = self.context.typed_fields()
        for key, value in kwargs.items():
            if key in typed:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(DocSpineError):
    """
    Invalid static configuration, e.g. an ambiguous identity declaration.

    Raised when an entity type is resolved (first use or registration),
    never at write time. Never retryable - the declaration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False

    def __init__(self, message: str, *, entity_type: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if entity_type is not None:
            self.context.entity_type = entity_type


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class InvalidRangeError(DocSpineError, ValueError):
    """``end_at`` lies before ``start_at``."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, message: str | None = None, *, start_at: Any = None, end_at: Any = None, **kwargs: Any):
        super().__init__(
            message or f"end_at must not be earlier than start_at (start_at={start_at!r}, end_at={end_at!r})",
            **kwargs,
        )
        self.start_at = start_at
        self.end_at = end_at

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["start_at"] = repr(self.start_at)
        result["end_at"] = repr(self.end_at)
        return result


class UnsupportedGranularityError(DocSpineError, ValueError):
    """A granularity outside daily/monthly/yearly was requested."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, value: Any, message: str | None = None, **kwargs: Any):
        self.value = value
        super().__init__(message or f"Unsupported granularity: {value!r}", **kwargs)


# =============================================================================
# IDENTITY ERRORS
# =============================================================================


class IdentityError(DocSpineError):
    """An entity instance cannot produce the key an operation needs."""

    default_category = ErrorCategory.IDENTITY
    default_retryable = False


class IncompleteIdentityError(IdentityError):
    """Every id field of the entity is ``None`` (strict identity mode only)."""

    def __init__(self, entity_type: str, fields: tuple[str, ...], message: str | None = None):
        self.fields = fields
        super().__init__(
            message or f"{entity_type} has no value for any id field: {', '.join(fields)}",
            context=ErrorContext(entity_type=entity_type),
        )


class MissingIdentityError(IdentityError):
    """The entity type declares no id fields but the operation requires one."""

    def __init__(self, entity_type: str, message: str | None = None):
        super().__init__(
            message or f"{entity_type} declares no id fields; create requires an explicit identity",
            context=ErrorContext(entity_type=entity_type),
        )


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreError(DocSpineError):
    """Base class for document store failures."""

    default_category = ErrorCategory.STORE
    default_retryable = False


class StoreRequestError(StoreError):
    """The store answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        error_type: str | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status = status
        self.error_type = error_type
        self.reason = reason
        if status is not None:
            self.context.http_status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.error_type:
            result["store_error_type"] = self.error_type
        if self.reason:
            result["reason"] = self.reason
        return result


class StoreUnavailableError(StoreRequestError):
    """The store is overloaded or failing (429 / 5xx); safe to retry later."""

    default_retryable = True


class StoreConnectionError(StoreError):
    """The store could not be reached at all."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, DocSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocSpineError",
    "ConfigurationError",
    "InvalidRangeError",
    "UnsupportedGranularityError",
    "IdentityError",
    "IncompleteIdentityError",
    "MissingIdentityError",
    "StoreError",
    "StoreRequestError",
    "StoreUnavailableError",
    "StoreConnectionError",
    "is_retryable",
]
