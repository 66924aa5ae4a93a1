"""
Configuration management for cody_cli.
Handles loading, saving, and validating configuration from a JSON file and environment variables.
"""
import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from .constants import (
    CONFIG_FILE,
    DEFAULT_API_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
)

logger = logging.getLogger(__name__)


@dataclass
class CodyConfig:
    """Connection and generation settings for the chat endpoint."""
    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    model: str = ""
    max_tokens: Optional[int] = DEFAULT_MAX_TOKENS
    temperature: Optional[float] = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT

    @property
    def is_complete(self) -> bool:
        """True when URL, key and model are all set."""
        return bool(self.api_url and self.api_key and self.model)

    @property
    def masked_key(self) -> str:
        """API key with everything but the last four characters hidden."""
        if not self.api_key:
            return ""
        return f"****{self.api_key[-4:]}"


# Environment variables checked in order; the first one set wins
ENV_VARS: dict[str, tuple[str, ...]] = {
    "api_url": ("CODY_API_URL", "OPENAI_API_BASE"),
    "api_key": ("CODY_API_KEY", "OPENROUTER_API_KEY", "OPENAI_API_KEY"),
    "model": ("CODY_MODEL",),
    "timeout": ("CODY_TIMEOUT",),
}


def validate_config(config: CodyConfig) -> list[str]:
    """
    Validate a configuration.

    Args:
        config: Configuration to check

    Returns:
        List of human-readable problems, empty when valid
    """
    errors = []

    if not config.api_url:
        errors.append("API URL is required")
    else:
        parsed = urlparse(config.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append("Invalid API URL format")

    if not config.api_key:
        errors.append("API key is required")

    if not config.model:
        errors.append("Model is required")

    if config.timeout <= 0:
        errors.append("Timeout must be positive")

    return errors


_NUMBER_FIELDS = {"timeout": float, "temperature": float, "max_tokens": int}


def _coerce(key: str, value: Any) -> Any:
    """Convert a config file value to the type of its field."""
    if key in _NUMBER_FIELDS:
        if isinstance(value, bool):
            raise TypeError(key)
        return _NUMBER_FIELDS[key](value)
    if not isinstance(value, str):
        raise TypeError(key)
    return value.rstrip("/") if key == "api_url" else value


class ConfigManager:
    """
    Manages configuration with support for a JSON file and environment variables.

    Environment variables take precedence over config file values.
    """

    def __init__(self, config_file: Optional[Path] = None, environ: Optional[dict] = None) -> None:
        self._config_file = Path(config_file) if config_file else CONFIG_FILE
        self._environ = os.environ if environ is None else environ
        self._config = CodyConfig()
        self._load_config()
        self._load_env_vars()

    @property
    def config_file(self) -> Path:
        """Path of the JSON config file."""
        return self._config_file

    @property
    def config(self) -> CodyConfig:
        """Get the current configuration."""
        return self._config

    def _load_config(self) -> None:
        """Load configuration from the JSON file."""
        if not self._config_file.exists():
            return

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not load config %s: %s", self._config_file, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a JSON object", self._config_file)
            return

        known = {f.name for f in fields(CodyConfig)}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            try:
                setattr(self._config, key, _coerce(key, value))
            except (TypeError, ValueError):
                logger.warning("Ignoring %s=%r in %s: wrong type", key, value, self._config_file)

    def _load_env_vars(self) -> None:
        """Overlay values from environment variables."""
        for attr, names in ENV_VARS.items():
            for name in names:
                value = self._environ.get(name)
                if not value:
                    continue
                if attr == "timeout":
                    try:
                        self._config.timeout = float(value)
                    except ValueError:
                        logger.warning("Ignoring %s=%r: not a number", name, value)
                elif attr == "api_url":
                    self._config.api_url = value.rstrip("/")
                else:
                    setattr(self._config, attr, value)
                break

    def update(self, persist: bool = True, **kwargs: Any) -> None:
        """Update configuration fields, saving to disk unless told otherwise."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        if persist:
            self.save()

    def save(self) -> None:
        """Persist the current configuration to the JSON file."""
        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self._config), f, indent=2)

    def validate(self) -> list[str]:
        """Validate the current configuration."""
        return validate_config(self._config)

    def reload(self) -> None:
        """Reload configuration from file and environment."""
        self._config = CodyConfig()
        self._load_config()
        self._load_env_vars()


_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
