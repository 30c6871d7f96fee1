from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path


class PersistenceError(RuntimeError):
    pass


class JsonStore:
    """Key/value store backed by a single JSON object on disk.

    Every write replaces the whole file atomically, so a crash mid-write leaves
    the previous contents intact. Writes are serialized across threads.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PersistenceError(f"Cannot read {self._path}: {e}") from e
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt store {self._path}: {e}") from e
        if not isinstance(raw, dict):
            raise PersistenceError(f"Corrupt store {self._path}: expected an object")
        return raw

    def _write_all(self, data: dict[str, object]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp, self._path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write {self._path}: {e}") from e

    def get(self, key: str, default: object = None) -> object:
        return self._read_all().get(key, default)

    def set(self, key: str, value: object) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)
