"""Durable byte stores the character ledger writes to.

The ledger is handed its stores at startup and never inspects the platform
itself. Every store matches the protocol:

    async def read(self, key: str) -> bytes | None: ...   # None = no such key
    async def write(self, key: str, data: bytes) -> None: ...

Both raise StoreError on I/O failure. File I/O is synchronous inside the
coroutines; a ledger read or write blocks the event loop until it finishes.

    FileStore          one file per key inside an app-data directory
                       (desktop builds).
    LocalStorageStore  every key in a single JSON object file, string
                       values, the same model as browser localStorage
                       (web builds, and the desktop backup copy).
    MemoryStore        dict-backed, nothing touches disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Store(Protocol):
    async def read(self, key: str) -> bytes | None: ...

    async def write(self, key: str, data: bytes) -> None: ...


class FileStore:
    """Stores each key as `<directory>/<key>`; the directory is created on demand."""

    platform = "desktop"

    def __init__(self, directory: Path) -> None:
        self._dir = directory

    def path_for(self, key: str) -> Path:
        return self._dir / key

    def _ensure_dir(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create app data directory %s: %s", self._dir, e)

    async def read(self, key: str) -> bytes | None:
        self._ensure_dir()
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}") from e

    async def write(self, key: str, data: bytes) -> None:
        self._ensure_dir()
        path = self.path_for(key)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e

    def describe(self, key: str) -> dict[str, Any]:
        path = self.path_for(key)
        return {"filePath": str(path), "fileExists": path.is_file()}


class LocalStorageStore:
    """Key → string map persisted as one JSON object file."""

    platform = "web"

    def __init__(self, path: Path) -> None:
        self._path = path

    def _load(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            items = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read local storage {self._path}: {e}") from e
        if not isinstance(items, dict):
            raise StoreError(f"Local storage {self._path} is not a JSON object")
        return items

    async def read(self, key: str) -> bytes | None:
        value = self._load().get(key)
        if value is None:
            return None
        return str(value).encode("utf-8")

    async def write(self, key: str, data: bytes) -> None:
        try:
            value = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"Local storage only holds text, got undecodable bytes for {key!r}") from e
        items = self._load()
        items[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(items), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot write local storage {self._path}: {e}") from e


class MemoryStore:
    platform = "memory"

    def __init__(self, items: dict[str, bytes] | None = None) -> None:
        self.items: dict[str, bytes] = dict(items or {})

    async def read(self, key: str) -> bytes | None:
        return self.items.get(key)

    async def write(self, key: str, data: bytes) -> None:
        self.items[key] = data


class StoreError(RuntimeError):
    """Raised when a store cannot be read or written."""
