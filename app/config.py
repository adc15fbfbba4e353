"""Application configuration loaded from environment variables, .env and the srepd YAML file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("~/.config/srepd/srepd.yaml")

# srepd.yaml key -> Settings field
_FILE_KEYS: dict[str, str] = {
    "token": "pagerduty_token",
    "teams": "teams",
    "silentuser": "silent_user",
    "ignoredusers": "ignored_users",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Global mode
    alertops_mode: str = Field(default="mock", description="Global mode: 'mock' or 'live'")

    # PagerDuty
    pagerduty_mode: str = Field(default="")
    pagerduty_token: str = Field(default="")
    pagerduty_api_base_url: str = Field(default="https://api.pagerduty.com")
    request_timeout: float = Field(default=30.0, gt=0)

    # On-call targeting
    teams: list[str] = Field(default_factory=list)
    silent_user: str = Field(default="")
    ignored_users: list[str] = Field(default_factory=list)

    # Pagination
    page_limit: int = Field(default=100, gt=0)
    max_pages: int = Field(default=1000, gt=0)

    # Mock settings
    mock_scenario: str = Field(default="acknowledged_high")
    mock_delay_enabled: bool = Field(default=True)

    log_level: str = Field(default="INFO")

    def get_integration_mode(self, integration: str) -> str:
        """Return the effective mode for a given integration.

        Per-integration overrides take precedence over the global alertops_mode.
        """
        override = getattr(self, f"{integration}_mode", "")
        return override if override else self.alertops_mode

    def require_live_credentials(self) -> None:
        """Raise ConfigurationError if live PagerDuty access is selected without a token."""
        if self.get_integration_mode("pagerduty") != "mock" and not self.pagerduty_token:
            raise ConfigurationError(
                "PagerDuty token not set. Add 'token' to the config file or set PAGERDUTY_TOKEN."
            )

    @property
    def available_scenarios(self) -> list[str]:
        return [
            "acknowledged_high",
            "quiet",
        ]


def read_config_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read an srepd YAML config file and map its keys onto Settings fields.

    A missing file yields an empty mapping.
    """
    config_path = Path(os.path.expandvars(str(path))).expanduser()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config file '{config_path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{config_path}' must contain a mapping")

    return {field: data[key] for key, field in _FILE_KEYS.items() if data.get(key) is not None}


def load_settings(path: str | os.PathLike[str] | None = None, **overrides: Any) -> Settings:
    """Build Settings from (highest first) *overrides*, environment/.env, then the config file."""
    file_values = read_config_file(path if path is not None else DEFAULT_CONFIG_PATH)
    try:
        env_values = Settings().model_dump(exclude_unset=True)
        return Settings(**{**file_values, **env_values, **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def get_settings() -> Settings:
    """Create and return the application settings."""
    return load_settings()
