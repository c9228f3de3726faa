"""Configuration management for healthwait."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .logging import DEFAULT_LOG_LEVEL, LOG_LEVELS


@dataclass(frozen=True)
class DisplayConfig:
    """How status notifications are rendered."""

    quiet: bool = False
    monochrome: bool = False


@dataclass(frozen=True)
class Config:
    """Immutable defaults read from the healthwait config file."""

    timeout: int = 10
    runtime: str = "docker"
    monochrome: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> tuple[bool, str | None]:
        """
        Validate configuration values.

        Returns:
            tuple[bool, str | None]: (is_valid, error_message)
        """
        if (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, int)
            or self.timeout < 0
        ):
            return False, "timeout must be a non-negative integer"

        if not isinstance(self.runtime, str) or not self.runtime.strip():
            return False, "runtime must be a non-empty string (name or path)"

        if not isinstance(self.monochrome, bool):
            return False, "monochrome must be true or false"

        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            return False, f"log_level must be one of {', '.join(LOG_LEVELS)}"

        return True, None


DEFAULT_CONFIG = Config()


def get_config_path() -> Path:
    """Return the config file location, honouring HEALTHWAIT_CONFIG."""
    override = os.environ.get("HEALTHWAIT_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".healthwait.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, falling back to defaults.

    Args:
        config_path: Path to config file. Defaults to ~/.healthwait.json

    Returns:
        Config: Loaded or default configuration

    Raises:
        ConfigError: If config file exists but is invalid
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return DEFAULT_CONFIG

    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid configuration in {config_path}: expected a JSON object")

    config = Config(
        timeout=data.get("timeout", DEFAULT_CONFIG.timeout),
        runtime=data.get("runtime", DEFAULT_CONFIG.runtime),
        monochrome=data.get("monochrome", DEFAULT_CONFIG.monochrome),
        log_level=data.get("log_level", DEFAULT_CONFIG.log_level),
    )

    is_valid, error = config.validate()
    if not is_valid:
        raise ConfigError(f"Invalid configuration in {config_path}: {error}")

    return config
