"""docspine core -- errors, logging and settings shared by every layer.

Architecture::

    errors.py      Structured error hierarchy (DocSpineError and subclasses)
    logging.py     Structured logging (structlog)
    settings.py    DocSpineSettings (pydantic-settings) + get_settings() cache
"""

from docspine.core.errors import (
    ConfigurationError,
    DocSpineError,
    ErrorCategory,
    ErrorContext,
    IdentityError,
    IncompleteIdentityError,
    InvalidRangeError,
    MissingIdentityError,
    StoreConnectionError,
    StoreError,
    StoreRequestError,
    StoreUnavailableError,
    UnsupportedGranularityError,
    is_retryable,
)
from docspine.core.logging import LogContext, bind_context, configure_logging, get_logger
from docspine.core.settings import DocSpineSettings, clear_settings_cache, get_settings

__all__ = [
    "ConfigurationError",
    "DocSpineError",
    "ErrorCategory",
    "ErrorContext",
    "IdentityError",
    "IncompleteIdentityError",
    "InvalidRangeError",
    "MissingIdentityError",
    "StoreConnectionError",
    "StoreError",
    "StoreRequestError",
    "StoreUnavailableError",
    "UnsupportedGranularityError",
    "is_retryable",
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    "DocSpineSettings",
    "clear_settings_cache",
    "get_settings",
]
