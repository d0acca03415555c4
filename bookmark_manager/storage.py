"""Host key-value storage used as the persisted slot for bookmark data."""

import copy
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()


class KeyValueStore(ABC):
    """Abstract persistent key-value slot.

    Values must be plain data (dicts, lists, strings) without cycles.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get the value stored under `key`, or `default`."""
        pass

    @abstractmethod
    def update(self, key: str, value: Any) -> None:
        """Store `value` under `key`. A `None` value deletes the key."""
        pass


class MemoryKeyValueStore(KeyValueStore):
    """Process-local key-value slot.

    Values are copied on the way in and out so callers never share state with the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def update(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = copy.deepcopy(value)


class YamlKeyValueStore(KeyValueStore):
    """Key-value slot persisted as a single YAML file.

    The whole file is rewritten on every update.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: YAML file holding all keys (created on first update)
        """
        self.path = Path(path)
        logger.debug("YAML store initialized", path=str(self.path))

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load state", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to load state from {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Unexpected state format in {self.path}")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            logger.debug("State saved", path=str(self.path), keys=list(data.keys()))
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save state", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to save state to {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def update(self, key: str, value: Any) -> None:
        data = self._load()
        if value is None:
            if key not in data:
                return
            del data[key]
        else:
            data[key] = value
        self._save(data)
