"""
Settings for the request execution engine.

Settings live in a YAML file validated against ``RestClientSettings``. The
``SettingsProvider`` re-reads the file whenever its modification time changes,
so every request sees the latest values without restarting the service.
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError


logger = logging.getLogger(__name__)

# Folder holding cookies and saved responses
EXTENSION_FOLDER = Path.home() / ".rest-client"

# Environment variable pointing at the settings file
CONFIG_PATH_ENV = "REST_CLIENT_CONFIG"
DEFAULT_CONFIG_PATH = EXTENSION_FOLDER / "settings.yaml"

DEFAULT_USER_AGENT = "vscode-restclient"

SizeDisplay = Literal["auto", "bytes"]


class CertificateConfig(BaseModel):
    """Client certificate paths configured for a single host."""

    model_config = ConfigDict(extra="forbid")

    cert: str | None = None
    key: str | None = None
    pfx: str | None = None
    passphrase: str | None = None


class RestClientSettings(BaseModel):
    """Top-level settings file structure."""

    model_config = ConfigDict(extra="forbid")

    follow_redirect: bool = True
    default_headers: dict[str, str] = Field(
        default_factory=lambda: {"User-Agent": DEFAULT_USER_AGENT}
    )
    timeout_in_milliseconds: int = 0
    proxy: str | None = None
    proxy_strict_ssl: bool = False
    exclude_hosts_for_proxy: list[str] = Field(default_factory=list)
    certificates: dict[str, CertificateConfig] = Field(
        default_factory=dict,
        description="host[:port] -> client certificate paths",
    )
    remember_cookies_for_subsequent_requests: bool = True
    decode_escaped_unicode_characters: bool = False
    workspace_root: str | None = None
    size_display: SizeDisplay = "auto"

    @field_validator("timeout_in_milliseconds")
    @classmethod
    def clamp_timeout(cls, value: int) -> int:
        # Negative timeouts mean "no timeout", same as zero
        return max(value, 0)


def load_settings(config_path: Path) -> RestClientSettings:
    """Load settings from YAML. A missing file yields the defaults."""
    if not config_path.exists():
        return RestClientSettings()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_settings = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file: {e}") from e

    if raw_settings is None:
        return RestClientSettings()

    if not isinstance(raw_settings, dict):
        raise ConfigError("Settings file must be a YAML mapping")

    try:
        return RestClientSettings.model_validate(raw_settings)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings structure: {e}") from e


class SettingsProvider:
    """
    Hands out the current settings, reloading the file when it changes.

    Usage:
        provider = SettingsProvider(Path("settings.yaml"))
        settings = provider.current()

    A provider built with ``SettingsProvider.fixed(settings)`` never touches
    the filesystem and always returns the given settings.
    """

    def __init__(self, config_path: Path | None = None):
        self._config_path = config_path
        self._settings: RestClientSettings | None = None
        self._loaded_mtime: float | None = None

    @classmethod
    def fixed(cls, settings: RestClientSettings) -> "SettingsProvider":
        provider = cls(None)
        provider._settings = settings
        return provider

    @classmethod
    def from_environment(cls) -> "SettingsProvider":
        path = os.environ.get(CONFIG_PATH_ENV)
        return cls(Path(path) if path else DEFAULT_CONFIG_PATH)

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def current(self) -> RestClientSettings:
        if self._config_path is None:
            if self._settings is None:
                self._settings = RestClientSettings()
            return self._settings

        try:
            mtime = self._config_path.stat().st_mtime
        except FileNotFoundError:
            mtime = None

        if self._settings is None or mtime != self._loaded_mtime:
            self._settings = load_settings(self._config_path)
            self._loaded_mtime = mtime
            logger.debug("Loaded settings from %s", self._config_path)

        return self._settings
