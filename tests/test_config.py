"""
Unit tests for service configuration (Settings).

Tests verify:
- Settings load from environment variables with correct defaults.
- DATABASE_URL is required; credentials are optional.
- GEOSTAR_BASE_URL must be HTTPS and TIMEZONE a known IANA zone.
- Numeric constraints are enforced.

CHANGELOG:
- 2026-10-09: Cover FETCH_INTERVAL_S (STORY-011)
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

import pytest
from pydantic import ValidationError

from geostar.config import Settings


class TestSettingsLoadsFromEnv:
    """Settings load values from environment variables."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.database_url.startswith("sqlite+aiosqlite:///")
        assert settings.geostar_email == ""
        assert settings.geostar_password == ""
        assert settings.geostar_base_url == "https://symphony.mygeostar.com"
        assert settings.timezone == "America/Los_Angeles"
        assert settings.session_max_age_s == 43200
        assert settings.fetch_interval_s == 0
        assert settings.has_credentials is False

    def test_loads_all_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEOSTAR_EMAIL", "pat@example.com")
        monkeypatch.setenv("GEOSTAR_PASSWORD", "pw")
        monkeypatch.setenv("GEOSTAR_BASE_URL", "https://portal.example.com/")
        monkeypatch.setenv("TIMEZONE", "Europe/Brussels")
        monkeypatch.setenv("SESSION_MAX_AGE_S", "3600")
        monkeypatch.setenv("FETCH_INTERVAL_S", "900")
        monkeypatch.setenv("API_PORT", "9000")

        settings = Settings()

        assert settings.has_credentials is True
        assert settings.geostar_base_url == "https://portal.example.com"
        assert settings.timezone == "Europe/Brussels"
        assert settings.session_max_age_s == 3600
        assert settings.fetch_interval_s == 900
        assert settings.api_port == 9000

    def test_dotenv_file_is_read(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("GEOSTAR_EMAIL=dotenv@example.com\n")

        assert Settings().geostar_email == "dotenv@example.com"

    def test_email_without_password_is_not_credentials(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GEOSTAR_EMAIL", "pat@example.com")

        assert Settings().has_credentials is False


class TestSettingsValidation:
    """Invalid values are rejected at load time."""

    def test_missing_database_url_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL")

        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert "database_url" in str(exc_info.value).lower()

    def test_http_base_url_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEOSTAR_BASE_URL", "http://symphony.mygeostar.com")

        with pytest.raises(ValidationError, match="HTTPS"):
            Settings()

    def test_unknown_timezone_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ValidationError, match="IANA"):
            Settings()

    @pytest.mark.parametrize("value", ["0", "-5"])
    def test_non_positive_session_ttl_rejected(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv("SESSION_MAX_AGE_S", value)

        with pytest.raises(ValidationError):
            Settings()

    def test_negative_fetch_interval_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCH_INTERVAL_S", "-1")

        with pytest.raises(ValidationError):
            Settings()

    @pytest.mark.parametrize("value", ["0", "70000"])
    def test_api_port_out_of_range_rejected(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv("API_PORT", value)

        with pytest.raises(ValidationError):
            Settings()
