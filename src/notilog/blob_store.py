from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from sqlitedict import SqliteDict  # type: ignore

from notilog.config import get_settings
from notilog.utils.log import logger


class BlobStore(Protocol):
    """
    Key-value store of opaque blobs.

    `set` must replace the whole value atomically: a concurrent `get` sees the
    old value or the new one, never a mix.
    """

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...
    def remove(self, key: str) -> None: ...


def _encode(value: bytes) -> bytes:
    return bytes(value)


def _decode(raw: bytes) -> bytes:
    return bytes(raw)


class SqliteBlobStore:
    """
    SQLite-backed blob store (default).

    Each value is one row; SqliteDict writes it with a single REPLACE, so
    replacement is atomic for readers on other connections.
    """

    def __init__(self, db_path: Path, *, tablename: str = "blobs") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.tablename = tablename

    def _db(self) -> SqliteDict:
        # Open/close per operation (avoids cross-thread SQLite handle issues)
        return SqliteDict(
            str(self.db_path),
            tablename=self.tablename,
            autocommit=True,
            encode=_encode,
            decode=_decode,
        )

    def get(self, key: str) -> bytes | None:
        with self._db() as db:
            return db.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._db() as db:
            db[key] = value

    def remove(self, key: str) -> None:
        with self._db() as db:
            if key in db:
                del db[key]


class MemoryBlobStore:
    """
    In-process blob store; values are immutable bytes swapped by reference.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        blob = bytes(value)
        with self._lock:
            self._data[key] = blob

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


def build_blob_store(db_path: Path | None = None) -> BlobStore:
    """
    Build the blob backend based on NOTILOG_STORE_BACKEND.

    Unknown values fall back to SQLite.
    """
    s = get_settings()
    backend = str(getattr(s, "store_backend", "sqlite") or "sqlite").strip().lower()
    if backend == "memory":
        logger.info("blob_store_memory", note="log is not persisted across restarts")
        return MemoryBlobStore()
    if backend != "sqlite":
        logger.warning("blob_store_backend_invalid", value=backend)
    path = Path(db_path) if db_path is not None else s.db_path()
    return SqliteBlobStore(path)
