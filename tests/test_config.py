"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from agency_desk.common.config import AiConfig, AppConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep override variables from the host out of these tests."""
    for var in ("AGENCY_DB_PATH", "GEMINI_API_KEY", "API_KEY", "AGENCY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    """Test configuration loading."""

    def test_load_valid_config(self, dev_config_path: Path):
        """Test loading a valid configuration file."""
        config = load_config(dev_config_path)

        assert isinstance(config, AppConfig)
        assert config.environment == "test"
        assert config.desk.bcrypt_rounds == 4
        assert config.desk.default_rows_per_page == 25

    def test_load_minimal_config(self, temp_dir: Path):
        """Test loading a minimal configuration with defaults."""
        config_path = temp_dir / "minimal.yaml"
        with open(config_path, "w") as f:
            yaml.dump({"environment": "minimal"}, f)

        config = load_config(config_path)

        assert config.environment == "minimal"
        assert config.database.path == "data/agency_desk.db"
        assert config.logging.level == "INFO"
        assert config.ai.model == "gemini-2.5-flash"
        assert config.desk.bcrypt_rounds == 12

    def test_load_empty_config(self, temp_dir: Path):
        """Test loading an empty configuration file."""
        config_path = temp_dir / "empty.yaml"
        config_path.write_text("")

        config = load_config(config_path)

        assert config.environment == "dev"
        assert config.database.path == "data/agency_desk.db"

    def test_load_missing_config(self, temp_dir: Path):
        """Test loading a missing configuration file."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "missing.yaml")

    def test_non_mapping_root_rejected(self, temp_dir: Path):
        """Test that a YAML list at the root is rejected."""
        config_path = temp_dir / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            load_config(config_path)

    def test_bcrypt_rounds_bounds(self, temp_dir: Path):
        """Test that an out-of-range bcrypt cost is rejected."""
        config_path = temp_dir / "weak.yaml"
        with open(config_path, "w") as f:
            yaml.dump({"desk": {"bcrypt_rounds": 2}}, f)

        with pytest.raises(ValidationError):
            load_config(config_path)

    def test_config_logging_section(self, dev_config_path: Path):
        """Test logging configuration section."""
        config = load_config(dev_config_path)

        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"
        assert config.logging.log_file is None


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_db_path_override(self, dev_config_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test AGENCY_DB_PATH replaces the configured path."""
        monkeypatch.setenv("AGENCY_DB_PATH", "/tmp/override.db")

        config = load_config(dev_config_path)

        assert config.database.path == "/tmp/override.db"

    def test_gemini_key_override(self, dev_config_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test GEMINI_API_KEY replaces the configured key."""
        monkeypatch.setenv("GEMINI_API_KEY", "from_env")

        config = load_config(dev_config_path)

        assert config.ai.api_key == "from_env"

    def test_api_key_fallback(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """Test API_KEY is used when GEMINI_API_KEY is absent."""
        monkeypatch.setenv("API_KEY", "fallback")
        config_path = temp_dir / "empty.yaml"
        config_path.write_text("")

        config = load_config(config_path)

        assert config.ai.api_key == "fallback"
        assert config.ai.is_configured is True

    def test_log_level_override(self, dev_config_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test AGENCY_LOG_LEVEL replaces the configured level."""
        monkeypatch.setenv("AGENCY_LOG_LEVEL", "WARNING")

        config = load_config(dev_config_path)

        assert config.logging.level == "WARNING"


class TestAiConfig:
    """Test AI configuration."""

    def test_not_configured_without_key(self):
        """Test is_configured is False without an API key."""
        assert AiConfig().is_configured is False

    def test_not_configured_when_disabled(self):
        """Test is_configured is False when disabled."""
        assert AiConfig(api_key="key", enabled=False).is_configured is False

    def test_configured_with_key(self):
        """Test is_configured is True with a key."""
        assert AiConfig(api_key="key").is_configured is True
