"""
Storage port - the key/value store every service reads and writes.

Values are plain JSON-serializable data (lists, dicts, numbers, strings).
Each service is handed a StoragePort instead of reaching for a global.
"""

import copy
import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from loguru import logger

from mediflex.utils import ensure_directory

# ─── Fixed keys ───────────────────────────────────────────────────────────────

INVENTORY_KEY     = "mediflex_inventory"
DISTRIBUTORS_KEY  = "distributors"
BUYERS_KEY        = "regularBuyers"
ACTIVITIES_KEY    = "recentActivities"
OCR_SCANS_KEY     = "ocrScansCount"
REPORTS_KEY       = "reportsCount"


class StoragePort(ABC):

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryStorage(StoragePort):
    """
    In-process store. Values are kept as JSON text, so callers always get
    a fresh copy back and unserializable values fail on ``set``.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStorage(StoragePort):
    """
    One JSON object on disk, loaded on first access and rewritten on every
    change. A file that cannot be parsed is logged and treated as empty.
    """

    def __init__(self, path: str):
        self.path = path
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data

        self._data = {}
        if not os.path.exists(self.path):
            return self._data

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[JsonFileStorage] Could not read {self.path}: {e}")
            return self._data

        if isinstance(loaded, dict):
            self._data = loaded
        else:
            logger.error(f"[JsonFileStorage] {self.path} does not hold a JSON object, ignoring it")
        return self._data

    def _flush(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            ensure_directory(directory)
        text = json.dumps(self._data, indent=2, ensure_ascii=False)
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(text)

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._load().get(key, default))

    def set(self, key: str, value: Any) -> None:
        self._load()[key] = copy.deepcopy(value)
        self._flush()

    def remove(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()
