"""Configuration for the ehr command line, stored in YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".ehr-domain"

DEFAULTS: dict[str, str] = {
    "storage.backend": "yaml",
    "storage.path": f"{CONFIG_DIR_NAME}/cohorts.yaml",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


class Config:
    """Layered configuration backed by YAML files.

    Lookups go local file, then global file, then DEFAULTS. The local file is
    ``.ehr-domain/config.yaml`` under the working directory and the global one
    is ``~/.ehr-domain/config.yaml``. Writes only touch the selected file.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            use_global: If True, read and write the global file only
            config_dir: Directory holding the selected config file (overrides the default location)
        """
        self.is_global = use_global
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
        self.config_file = self.config_dir / "config.yaml"

        self._values: dict[str, Any] = self._load()
        self._fallback: dict[str, Any] = {}
        if not self.is_global:
            global_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_file.exists() and global_file != self.config_file:
                try:
                    self._fallback = _read_yaml(global_file)
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Ignoring unreadable global config", path=str(global_file), error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            values = _read_yaml(self.config_file)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", path=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e
        logger.debug("Config loaded", keys=list(values))
        return values

    def _save(self) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._values, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            logger.error("Failed to save config", path=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a value, falling back to the global file and then the defaults."""
        for layer in (self._values, self._fallback, DEFAULTS):
            if key in layer:
                return str(layer[key])
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    def get_list(self, key: str) -> list[str]:
        """Get a comma separated value as a list of stripped items."""
        value = self.get(key) or ""
        return [item.strip() for item in value.split(",") if item.strip()]

    def set(self, key: str, value: str) -> None:
        logger.debug("Setting config value", key=key)
        self._values[key] = value
        self._save()

    def unset(self, key: str) -> None:
        logger.debug("Unsetting config value", key=key)
        if self._values.pop(key, None) is not None:
            self._save()

    def list(self) -> dict[str, str]:
        """List explicitly configured values, local overriding global."""
        merged = dict(self._fallback)
        merged.update(self._values)
        return {key: str(value) for key, value in merged.items()}


def get_config(use_global: bool = False) -> Config:
    return Config(use_global=use_global)
