"""
JSON-file key/value store.

Holds every piece of studio state (API keys, subscription, gallery,
spending limits) as plain JSON values under string keys. Each ``set`` or
``delete`` rewrites the whole file through a temporary file and an atomic
rename. Concurrent writers are not coordinated.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict, List, Optional

DEFAULT_STORE_PATH = os.path.join("~", ".genstudio", "store.json")


class KeyValueStore:
    """Persistent key/value store backed by a single JSON file.

    Parameters:
        path: File location (``~`` is expanded). Created on first write.
    """

    def __init__(self, path: str = DEFAULT_STORE_PATH):
        self.path = os.path.abspath(os.path.expanduser(path))
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is None:
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as fh:
                    data = json.load(fh)
                if not isinstance(data, dict):
                    raise ValueError(f"Invalid store file (expected an object): {self.path}")
                self._data = data
            else:
                self._data = {}
        return self._data

    def _flush(self) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._load()[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    def keys(self) -> List[str]:
        return sorted(self._load().keys())

    def reload(self) -> None:
        """Drop the in-memory copy so the next read hits the file again."""
        self._data = None

    def __contains__(self, key: str) -> bool:
        return key in self._load()

    def __repr__(self) -> str:
        return f"KeyValueStore(path='{self.path}')"
