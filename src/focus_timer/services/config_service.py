"""Configuration service for focus-timer.

``ConfigService`` is the single source of truth for the persisted
configuration. It handles:

- Loading and saving config.json (created with defaults on first use)
- Dotted-key get/set/reset (``timer.focus``, ``switch.backend`` ...)
- Resolving the single-instance lock path
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_runtime_dir
from pydantic import BaseModel, ValidationError

from focus_timer.models.config_models import AppConfig
from focus_timer.models.exceptions import ConfigError

_APP_NAME = "focus_timer"


class ConfigService:
    """Loads, saves and edits the application configuration."""

    def __init__(self, config_dir: Path | None = None, runtime_dir: Path | None = None):
        self.config_dir = config_dir or Path(user_config_dir(_APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.runtime_dir = runtime_dir or Path(user_runtime_dir(_APP_NAME))

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {self.config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load config {self.config_path}: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}") from e

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self._get_from(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        Raises:
            ConfigError: Unknown key or a value the model rejects.
        """
        keys = key.split(".")
        if not self.is_known_key(key):
            raise ConfigError(f"Unknown configuration key '{key}'")

        config_dict = self.config.model_dump()
        current = config_dict
        for k in keys[:-1]:
            current = current[k]
        current[keys[-1]] = value

        try:
            self._config = AppConfig.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for '{key}': {value!r}") from e
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset the whole configuration, or a single key, to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return
        if not self.is_known_key(key):
            raise ConfigError(f"Unknown configuration key '{key}'")
        self.set(key, self._get_from(AppConfig(), key))

    def lock_path(self) -> Path:
        """Where the single-instance lock marker lives."""
        return self.config.lock.resolve(self.runtime_dir)

    @staticmethod
    def _get_from(config: BaseModel, key: str) -> Any:
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    @staticmethod
    def is_known_key(key: str) -> bool:
        model: Any = AppConfig
        for k in key.split("."):
            if not (isinstance(model, type) and issubclass(model, BaseModel)):
                return False
            field = model.model_fields.get(k)
            if field is None:
                return False
            model = field.annotation
        return True


@lru_cache
def get_config_service() -> ConfigService:
    """Get the process-wide ConfigService instance."""
    return ConfigService()
