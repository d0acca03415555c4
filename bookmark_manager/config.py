"""Settings for bookmark-manager, stored as YAML next to the bookmark state."""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".bookmark-manager"
CONFIG_FILE_NAME = "config.yaml"
STATE_FILE_NAME = "state.yaml"

DEFAULTS: dict[str, str] = {
    "default.kind": "global",
}


def global_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def local_config_dir() -> Path:
    return Path.cwd() / CONFIG_DIR_NAME


def _read_settings(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            settings = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config", path=str(path), error=str(e))
        raise ValueError(f"Failed to load config from {path}: {e}") from e

    if not isinstance(settings, dict):
        raise ValueError(f"Unexpected config format in {path}")
    return settings


class Config:
    """Bookmark-manager settings.

    Workspace settings live in `./.bookmark-manager/config.yaml`, user settings
    in `~/.bookmark-manager/config.yaml`. A workspace config reads through to
    the user config for keys it does not set, then to `DEFAULTS`.

    Known keys:
        workspace.root: Directory bookmark names are made relative to
        storage.global_file: YAML file holding `global` bookmarks
        storage.workspace_file: YAML file holding `workspace` bookmarks
        default.kind: Kind used when a command gets no `--kind`
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize settings.

        Args:
            use_global: Read and write the user config only
            config_dir: Directory holding the config file, instead of the default location
        """
        self.is_global = use_global
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = global_config_dir() if use_global else local_config_dir()
        self.config_file = self.config_dir / CONFIG_FILE_NAME

        self._settings = _read_settings(self.config_file)
        self._fallback: dict[str, Any] = {}
        if not self.is_global:
            try:
                self._fallback = _read_settings(global_config_dir() / CONFIG_FILE_NAME)
            except ValueError as e:
                logger.warning("Ignoring unreadable user config", error=str(e))

        logger.debug("Config loaded", config_file=str(self.config_file), is_global=self.is_global)

    def _write(self) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._settings, f, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config", path=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved", config_file=str(self.config_file))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a setting, falling back to the user config, then `default`, then `DEFAULTS`."""
        if key in self._settings:
            return self._settings[key]
        if key in self._fallback:
            return self._fallback[key]
        return default if default is not None else DEFAULTS.get(key)

    def set(self, key: str, value: str) -> None:
        logger.info("Setting config value", key=key, is_global=self.is_global)
        self._settings[key] = value
        self._write()

    def unset(self, key: str) -> None:
        if key not in self._settings:
            return
        logger.info("Unsetting config value", key=key, is_global=self.is_global)
        del self._settings[key]
        self._write()

    def list(self) -> dict[str, str]:
        """List explicitly set values, workspace values overriding user values."""
        return {**self._fallback, **self._settings}

    @property
    def workspace_root(self) -> Path:
        root = self.get("workspace.root")
        return Path(root).expanduser().resolve() if root else Path.cwd()

    @property
    def global_state_file(self) -> Path:
        path = self.get("storage.global_file")
        return Path(path).expanduser() if path else global_config_dir() / STATE_FILE_NAME

    @property
    def workspace_state_file(self) -> Path:
        path = self.get("storage.workspace_file")
        return Path(path).expanduser() if path else self.workspace_root / CONFIG_DIR_NAME / STATE_FILE_NAME


def get_config(use_global: bool = False) -> Config:
    """Get the workspace config, or the user config when `use_global` is set."""
    return Config(use_global=use_global)
