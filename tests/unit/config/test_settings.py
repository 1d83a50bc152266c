"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from parks_incidents.config import Settings
from parks_incidents.config.logging import parse_size


class TestSettings:
    def test_environment_is_normalised(self):
        settings = Settings(_env_file=None, environment="PROD")

        assert settings.environment == "prod"
        assert settings.is_production
        assert not settings.is_development

    def test_unknown_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="moon")

    def test_log_level_is_upper_cased(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_base_url_trailing_slash_is_dropped(self):
        assert Settings(_env_file=None, api_base_url="http://api.local/").api_base_url == "http://api.local"

    def test_client_headers(self, settings):
        headers = settings.get_client_headers()

        assert headers["Authorization"] == "Bearer test-token"
        assert headers["X-User-Id"] == "42"

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_USER_ID", "9")
        monkeypatch.setenv("CACHE_STALE_TIME", "30")

        settings = Settings(_env_file=None)

        assert settings.api_user_id == 9
        assert settings.cache_stale_time == 30.0

    def test_user_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_user_id=0)


class TestParseSize:
    @pytest.mark.parametrize(
        "size, expected",
        [("100MB", 100 * 1024**2), ("512kb", 512 * 1024), ("1GB", 1024**3), (" 2048 ", 2048)],
    )
    def test_units(self, size, expected):
        assert parse_size(size) == expected
