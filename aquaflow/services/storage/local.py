"""
Local Key-Value Stores

- InMemoryKeyValueStore: a dict of JSON strings, for tests and demos
- JsonFileKeyValueStore: one ``<key>.json`` file per key in a directory

Both store the serialized JSON text, so a value read back is always a
fresh copy and never aliases what the caller passed to ``set``.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

from aquaflow.services.storage.interface import KeyValueStore, StorageError


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt value under {key}: {e}")

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")

    def keys(self) -> list[str]:
        return list(self._data)

    def put_raw(self, key: str, raw: str) -> None:
        """Store raw text under ``key`` without encoding it (test helper)."""
        self._data[key] = raw


class JsonFileKeyValueStore(KeyValueStore):
    """
    Directory-backed store.

    Writes go to a temporary file that is then renamed over the target,
    so a crash mid-write leaves the previous value intact.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid key: {key!r}")
        return self._directory / f"{key}{self.SUFFIX}"

    def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path}: {e}")

    def keys(self) -> list[str]:
        if not self._directory.exists():
            return []
        return sorted(
            p.name[: -len(self.SUFFIX)]
            for p in self._directory.iterdir()
            if p.is_file() and p.name.endswith(self.SUFFIX)
        )
