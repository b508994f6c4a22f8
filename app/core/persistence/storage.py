"""
Purpose: Durable key/value text storage shaped like the browser's local
storage (get_item / set_item / remove_item).

What is inside:
InMemoryKeyValueStorage: dict-backed, for tests and throwaway runs.
FileKeyValueStorage: one file per key under a directory, with a total byte
quota. Going over the quota raises PersistenceFailure, like a browser's
QuotaExceededError.

Testing:
In-memory: simple state tests.
File: tmp_path fixture; quota and unreadable-file tests.
"""

from __future__ import annotations
import os
import re
from pathlib import Path
from typing import Optional

from core.errors import PersistenceFailure

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class InMemoryKeyValueStorage:
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileKeyValueStorage:
    def __init__(self, root: str | os.PathLike, *, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.root = Path(root)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.root / (_UNSAFE.sub("_", key) + ".json")

    def _used_bytes(self, *, excluding: Path) -> int:
        if not self.root.exists():
            return 0
        return sum(
            p.stat().st_size
            for p in self.root.glob("*.json")
            if p.is_file() and p != excluding
        )

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceFailure(f"Could not read {key!r}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        data = str(value).encode("utf-8")
        try:
            used = self._used_bytes(excluding=path)
            if used + len(data) > self.quota_bytes:
                raise PersistenceFailure(
                    f"Storage quota exceeded writing {key!r} "
                    f"({used + len(data)} > {self.quota_bytes} bytes)."
                )
            self.root.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_bytes(data)
            tmp.replace(path)
        except OSError as e:
            raise PersistenceFailure(f"Could not write {key!r}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure(f"Could not remove {key!r}: {e}") from e
