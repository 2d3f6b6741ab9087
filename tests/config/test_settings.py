"""Tests for settings models and the settings loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fitrec.config import load_settings
from fitrec.config.models import LoggingSettings, MediaSettings, Settings
from fitrec.shared.errors import ApplicationError, ErrorCode

TOML_CONFIG = """
[catalog]
timeout = 4.5
items_per_category = 6

[media]
provider_order = ["Tenor", "giphy", "tenor"]
tenor_api_key = "tenor-secret"

[cache]
max_size = 50

[logging]
level = "debug"
use_rich_console = false
"""


class TestSettingsDefaults:
    """Test cases for default values."""

    def test_defaults(self) -> None:
        """Test defaults match the catalog quota and cache sizing."""
        settings = Settings()

        assert settings.catalog.base_url == "https://exercisedb.dev/api/v1"
        assert settings.catalog.rate_limit_per_minute == 60
        assert settings.catalog.rate_limit_per_day == 5000
        assert settings.cache.max_size == 100
        assert settings.cache.results_ttl == 7200
        assert settings.media.provider_order == ["giphy", "tenor"]
        assert settings.media.probe_timeout == 3
        assert settings.logging.level == "INFO"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test FITREC_ variables with nested delimiters override defaults."""
        monkeypatch.setenv("FITREC_CATALOG__TIMEOUT", "2.5")
        monkeypatch.setenv("FITREC_MEDIA__GIPHY_API_KEY", "giphy-secret")
        monkeypatch.setenv("FITREC_MEDIA__PROVIDER_ORDER", '["unsplash"]')

        settings = Settings()

        assert settings.catalog.timeout == 2.5
        assert settings.media.credential_for("giphy") == "giphy-secret"
        assert settings.media.provider_order == ["unsplash"]


class TestMediaSettings:
    """Test cases for MediaSettings validation."""

    def test_provider_order_normalized(self) -> None:
        """Test names are lower-cased and de-duplicated in order."""
        settings = MediaSettings(provider_order=[" Tenor", "GIPHY", "tenor"])

        assert settings.provider_order == ["tenor", "giphy"]

    def test_unknown_provider_rejected(self) -> None:
        """Test an unknown provider name fails validation."""
        with pytest.raises(ValidationError, match="Unknown media provider"):
            MediaSettings(provider_order=["giphy", "flickr"])

    def test_repr_masks_credentials(self) -> None:
        """Test credentials never appear in repr."""
        settings = MediaSettings(giphy_api_key="super-secret")

        text = repr(settings)
        assert "super-secret" not in text
        assert "giphy_api_key=****" in text
        assert "tenor_api_key=[empty]" in text

    def test_credential_for_unknown_provider(self) -> None:
        """Test an unknown provider has no credential."""
        assert MediaSettings().credential_for("flickr") == ""


class TestLoggingSettings:
    """Test cases for LoggingSettings."""

    def test_level_uppercased(self) -> None:
        """Test the level is normalized."""
        assert LoggingSettings(level="warning").level == "WARNING"

    def test_invalid_level(self) -> None:
        """Test unknown levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")


class TestLoadSettings:
    """Test cases for load_settings()."""

    def test_explicit_toml_file(self, tmp_path: Path) -> None:
        """Test values are read from an explicit TOML file."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text(TOML_CONFIG, encoding="utf-8")

        settings = load_settings(config_file)

        assert settings.catalog.timeout == 4.5
        assert settings.catalog.items_per_category == 6
        assert settings.media.provider_order == ["tenor", "giphy"]
        assert settings.media.tenor_api_key == "tenor-secret"
        assert settings.cache.max_size == 50
        assert settings.logging.level == "DEBUG"
        assert settings.logging.use_rich_console is False

    def test_default_location(self, tmp_path: Path) -> None:
        """Test config/fitrec.toml in the working directory is picked up."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "fitrec.toml").write_text("[cache]\nmax_size = 7\n", encoding="utf-8")

        assert load_settings().cache.max_size == 7

    def test_no_file_uses_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the environment is used when no file exists."""
        monkeypatch.setenv("FITREC_CACHE__MAX_SIZE", "12")

        assert load_settings().cache.max_size == 12

    def test_dotenv_file_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a .env file in the working directory feeds the environment."""
        # Register the variable with monkeypatch so it is removed afterwards
        monkeypatch.setenv("FITREC_CACHE__MEDIA_TTL", "1")
        monkeypatch.delenv("FITREC_CACHE__MEDIA_TTL")
        (tmp_path / ".env").write_text("FITREC_CACHE__MEDIA_TTL=90\n", encoding="utf-8")

        assert load_settings().cache.media_ttl == 90

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test a missing explicit path is a configuration error."""
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "absent.toml")

        assert exc_info.value.code == ErrorCode.MISSING_CONFIG

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Test values failing validation raise INVALID_CONFIG."""
        config_file = tmp_path / "bad.toml"
        config_file.write_text('[media]\nprovider_order = ["flickr"]\n', encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(config_file)

        assert exc_info.value.code == ErrorCode.INVALID_CONFIG

    def test_unparsable_file(self, tmp_path: Path) -> None:
        """Test broken TOML raises FILE_READ_ERROR."""
        config_file = tmp_path / "broken.toml"
        config_file.write_text("[catalog\ntimeout = ", encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(config_file)

        assert exc_info.value.code == ErrorCode.FILE_READ_ERROR

