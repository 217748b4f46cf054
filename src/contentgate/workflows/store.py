"""Key-value persistence for gate state (in-memory + JSON file)."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get_string(self, key: str) -> Optional[str]:
        ...

    def set_string(self, key: str, value: str) -> None:
        ...

    def get_bool(self, key: str) -> bool:
        ...

    def set_bool(self, key: str, value: bool) -> None:
        ...


class MemoryStore:
    """Process-local store; absent keys read as ``None`` / ``False``."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get_string(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        return value if isinstance(value, str) else None

    def set_string(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def get_bool(self, key: str) -> bool:
        return self._data.get(key) is True

    def set_bool(self, key: str, value: bool) -> None:
        self._data[key] = bool(value)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._data)


class JsonFileStore(MemoryStore):
    """Durable store backed by one JSON object on disk.

    Every write rewrites the file through a temp file and ``os.replace`` so a
    crash never leaves a truncated document behind. A missing or corrupt file
    reads as an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        super().__init__(self._load())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("store %s unreadable (%s); starting empty", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("store %s is not a JSON object; starting empty", self.path)
            return {}
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = json.dumps(self._data, sort_keys=True, ensure_ascii=False, indent=2)
        tmp_path.write_text(payload + "\n", encoding="utf-8")
        os.replace(tmp_path, self.path)

    def set_string(self, key: str, value: str) -> None:
        with self._lock:
            super().set_string(key, value)
            self._flush()

    def set_bool(self, key: str, value: bool) -> None:
        with self._lock:
            super().set_bool(key, value)
            self._flush()


__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]
