"""Configuration loader for streamscribe."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from streamscribe.utils.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "config.yml"
CONFIG_PATH_ENV = "STREAMSCRIBE_CONFIG"


class ConfigLoader:
    """Loads and manages application configuration from a YAML file.

    A missing file is not an error: every setting has a default. Problems
    with the file's contents are recorded rather than raised so that importing
    the package never fails; ``settings()`` raises them at startup.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize the configuration loader.

        Args:
            config_path: Path to the configuration file. Defaults to the
                ``STREAMSCRIBE_CONFIG`` environment variable, then
                ``config.yml`` in the working directory.
        """
        self.config_path = Path(
            config_path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
        )
        self.config: Dict[str, Any] = {}
        self.validated_config = None
        self.error: Optional[str] = None
        self.load()

    def load(self) -> None:
        """Load configuration from the YAML file and validate it."""
        self.config = {}
        self.error = None

        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                self.validated_config = None
                self.error = f"Failed to read {self.config_path}: {e}"
                return

            if not isinstance(loaded, dict):
                self.validated_config = None
                self.error = f"{self.config_path} must contain a mapping"
                return
            self.config = loaded

        self._validate_config()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Validated values (with defaults filled in) are preferred over the raw
        file contents.

        Args:
            key: Configuration key (e.g., "asr.model_path").
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        if self.validated_config is not None:
            value: Any = self.validated_config.model_dump()
        else:
            value = self.config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-notation key and revalidate.

        Args:
            key: Configuration key (e.g., "audio.blocksize").
            value: Value to set.
        """
        keys = key.split(".")
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref or not isinstance(config_ref[k], dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        self._validate_config()

    def settings(self):
        """Return the validated configuration.

        Raises:
            ConfigurationError: If the file could not be read or validated.
        """
        if self.error is not None or self.validated_config is None:
            raise ConfigurationError(self.error or "Configuration not loaded")
        return self.validated_config

    def _validate_config(self) -> None:
        """Validate the loaded configuration using Pydantic schemas."""
        from .validators import validate_config

        try:
            self.validated_config = validate_config(self.config)
            self.error = None
        except ValueError as e:
            self.validated_config = None
            self.error = str(e)


# Global config instance
config = ConfigLoader()
