"""Application configuration loading and models."""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/agency_desk.db"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"  # "json" or "console"
    log_file: str | None = None


class AiConfig(BaseModel):
    """AI summary provider configuration."""

    enabled: bool = True
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        """Check if the provider can be used."""
        return self.enabled and bool(self.api_key)


class DeskConfig(BaseModel):
    """Back-office behaviour settings."""

    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    default_rows_per_page: int = 10


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: str = Field(default="dev", description="Environment name (dev/prod)")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    ai: AiConfig = Field(default_factory=AiConfig)
    desk: DeskConfig = Field(default_factory=DeskConfig)


def load_config(config_path: str | Path) -> AppConfig:
    """Load configuration from a YAML file with environment variable substitution.

    Environment variables can override config values. The following env vars are checked:
    - AGENCY_DB_PATH: SQLite database path
    - GEMINI_API_KEY (or API_KEY): AI summary provider key
    - AGENCY_LOG_LEVEL: Log level

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Parsed AppConfig instance.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the config file is invalid.
    """
    load_dotenv()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        raw_config: dict[str, Any] = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    _apply_env_overrides(raw_config)

    return AppConfig(**raw_config)


def _apply_env_overrides(config: dict[str, Any]) -> None:
    """Apply environment variable overrides to config dict.

    Args:
        config: Configuration dictionary to modify in place.
    """
    for section in ("database", "logging", "ai"):
        if not isinstance(config.get(section), dict):
            config[section] = {}

    if db_path := os.environ.get("AGENCY_DB_PATH"):
        config["database"]["path"] = db_path

    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    if api_key:
        config["ai"]["api_key"] = api_key

    if log_level := os.environ.get("AGENCY_LOG_LEVEL"):
        config["logging"]["level"] = log_level
