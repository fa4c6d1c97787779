"""
In-memory global storage shared between jobs
"""

import json
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from scriptjob.errors import YAMLLoadError
from scriptjob.storage.ports import IGlobalStorage
from scriptjob.utils.loggers import get_logger

logger = get_logger(__name__)

ChangeListener = Callable[[str], None]


class GlobalStorage(IGlobalStorage):
    """
    Thread-safe key-value store.

    Every write is immediately visible to all holders of the same instance;
    listeners are told which key changed after the lock is released.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = dict(initial or {})
        self._listeners: List[ChangeListener] = []

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def count(self) -> int:
        with self._lock:
            return len(self._data)

    def insert(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
        self._notify(key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())

    def remove(self, key: str) -> int:
        with self._lock:
            if key not in self._data:
                return 0
            del self._data[key]
        self._notify(key)
        return 1

    def value(self, key: str) -> Any:
        with self._lock:
            return self._data.get(key)

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callable that receives the key of every change."""
        self._listeners.append(listener)

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)

    def load_yaml(self, path: str) -> None:
        """
        Merge the top-level mapping of a YAML file into the store.

        Raises:
            YAMLLoadError: If the file cannot be read, parsed, or is not a mapping
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise YAMLLoadError(path, str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise YAMLLoadError(path, "top-level YAML value is not a mapping")

        with self._lock:
            self._data.update({str(k): v for k, v in data.items()})
        for key in data:
            self._notify(str(key))
        logger.debug("Loaded global storage", path=path, keys=len(data))

    def save_yaml(self, path: str) -> None:
        """Write the whole store to ``path`` as YAML."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, allow_unicode=True, sort_keys=True)
        logger.debug("Saved global storage", path=path, format="yaml")

    def save_json(self, path: str) -> None:
        """Write the whole store to ``path`` as JSON."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False, default=str)
        logger.debug("Saved global storage", path=path, format="json")
