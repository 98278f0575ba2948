"""
Centralized settings for docspine.

:class:`DocSpineSettings` gathers every knob the identity and index
selection layers expose (delimiter, strict identity, reference offset,
grouping, wildcard threshold) plus the store connection, validated once
and cached.

All fields can be set via ``DOCSPINE_*`` environment variables (e.g.
``DOCSPINE_UTC_OFFSET_HOURS=0``) or a ``.env`` file.

Tags:
    docspine, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from datetime import tzinfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocSpineSettings(BaseSettings):
    """docspine configuration.

    Fields
    ──────
    store_nodes            : Base URLs of the document store nodes
    store_request_timeout  : Per-request timeout in seconds
    id_delimiter           : Separator between id field values in a primary key
    strict_identity        : Reject entities whose id fields are all empty
    utc_offset_hours       : Fixed offset used to align period boundaries
    enable_group_select    : Collapse fully covered periods to ``YYYY.*`` tokens
    max_selector_tokens    : Above this many tokens fall back to ``prefix*``
    log_level / log_format : Structlog configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    store_nodes: list[str] = Field(default=["http://localhost:9200"])
    store_request_timeout: float = Field(default=30.0, gt=0)

    # ── Identity ─────────────────────────────────────────────────
    id_delimiter: str = Field(default="-", min_length=1)
    strict_identity: bool = Field(
        default=False,
        description="Raise IncompleteIdentityError instead of emitting a key of bare delimiters",
    )

    # ── Index selection ──────────────────────────────────────────
    # Existing stored index names were cut at +09:00 boundaries.
    utc_offset_hours: int = Field(default=9)
    enable_group_select: bool = Field(default=True)
    max_selector_tokens: int | None = Field(default=100, ge=1)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("utc_offset_hours")
    @classmethod
    def _check_offset(cls, value: int) -> int:
        if not -12 <= value <= 14:
            raise ValueError(f"utc_offset_hours must be within -12..14, got {value}")
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value

    @property
    def reference_tz(self) -> tzinfo:
        from docspine.indexing.periods import reference_timezone

        return reference_timezone(self.utc_offset_hours)


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, DocSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> DocSpineSettings:
    """Load, validate, and cache a :class:`DocSpineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = DocSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["DocSpineSettings", "get_settings", "clear_settings_cache"]
