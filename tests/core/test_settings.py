"""
Tests for docspine.core.settings.

Tests cover:
- Defaults
- DOCSPINE_* environment overrides
- Field validation
- get_settings() caching
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from docspine.core.settings import DocSpineSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self, settings):
        assert settings.store_nodes == ["http://localhost:9200"]
        assert settings.id_delimiter == "-"
        assert settings.strict_identity is False
        assert settings.utc_offset_hours == 9
        assert settings.enable_group_select is True
        assert settings.max_selector_tokens == 100
        assert settings.log_format == "json"

    def test_reference_tz(self, settings):
        assert settings.reference_tz.utcoffset(None) == timedelta(hours=9)


class TestEnvironment:
    """Environment variable overrides."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_UTC_OFFSET_HOURS", "0")
        monkeypatch.setenv("DOCSPINE_ID_DELIMITER", "|")
        monkeypatch.setenv("DOCSPINE_STRICT_IDENTITY", "true")
        settings = DocSpineSettings(_env_file=None)
        assert settings.utc_offset_hours == 0
        assert settings.id_delimiter == "|"
        assert settings.strict_identity is True

    def test_list_from_json(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_STORE_NODES", '["http://a:9200", "http://b:9200"]')
        assert DocSpineSettings(_env_file=None).store_nodes == ["http://a:9200", "http://b:9200"]


class TestValidation:
    """Rejected values."""

    @pytest.mark.parametrize("offset", [-13, 15])
    def test_offset_out_of_range(self, offset):
        with pytest.raises(ValidationError, match="utc_offset_hours"):
            DocSpineSettings(_env_file=None, utc_offset_hours=offset)

    def test_empty_delimiter(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(_env_file=None, id_delimiter="")

    def test_token_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(_env_file=None, max_selector_tokens=0)

    def test_token_limit_can_be_disabled(self):
        assert DocSpineSettings(_env_file=None, max_selector_tokens=None).max_selector_tokens is None

    def test_log_format_normalised(self):
        assert DocSpineSettings(_env_file=None, log_format="CONSOLE").log_format == "console"

    def test_log_format_rejected(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(_env_file=None, log_format="xml")


class TestGetSettings:
    """Cached settings factory."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DOCSPINE_MAX_SELECTOR_TOKENS", "10")
        assert get_settings() is first
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.max_selector_tokens == 10

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
