"""
CloudMemo - Configuration Tests
=================================

Server Settings validation plus the client's defaults.
"""

import pytest
from pydantic import ValidationError

from cloudmemo.client.config import ClientSettings
from cloudmemo.config import Settings


class TestSettings:

    @pytest.mark.parametrize(
        "raw, expected",
        [("/api", "/api"), ("api", "/api"), ("/api/", "/api"), ("", ""), ("/", "")],
    )
    def test_api_prefix_normalized(self, raw, expected):
        assert Settings(api_prefix=raw).api_prefix == expected

    def test_cors_origins_list(self):
        settings = Settings(cors_allowed_origins="http://a.test, http://b.test ,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_empty_cors_means_any_origin(self):
        assert Settings(cors_allowed_origins="").cors_origins_list == ["*"]

    def test_log_level_uppercased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    @pytest.mark.parametrize(
        "field", ["session_ttl_seconds", "cache_ttl_seconds", "clip_ttl_seconds"]
    )
    def test_ttl_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_default_ttls(self):
        settings = Settings(_env_file=None)
        assert settings.cache_ttl_seconds == 60
        assert settings.clip_ttl_seconds == 86400
        assert settings.session_ttl_seconds == 604800

    def test_missing_password_reported(self):
        with pytest.raises(ValueError, match="APP_PASSWORD"):
            Settings(app_password="").validate_required_for_production()

    def test_password_present_passes(self):
        Settings(app_password="s3cret").validate_required_for_production()


class TestClientSettings:

    def test_defaults(self):
        settings = ClientSettings(_env_file=None)
        assert settings.request_timeout_seconds == 10.0
        assert settings.autosave_delay_seconds == 5.0
        assert settings.min_new_memo_length == 3

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CLOUDMEMO_API_BASE_URL", "https://memo.example/api")
        monkeypatch.setenv("CLOUDMEMO_AUTOSAVE_DELAY_SECONDS", "1.5")

        settings = ClientSettings(_env_file=None)

        assert settings.api_base_url == "https://memo.example/api"
        assert settings.autosave_delay_seconds == 1.5
