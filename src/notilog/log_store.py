from __future__ import annotations

import json
import threading

from notilog.blob_store import BlobStore, build_blob_store
from notilog.config import get_settings
from notilog.errors import LogStoreReadError, LogStoreWriteError
from notilog.models import NotificationEntry
from notilog.ops import metrics
from notilog.utils.log import logger

LOG_KEY = "notification_log"
DEFAULT_MAX_ENTRIES = 500


class LogStore:
    """
    Capped, newest-first notification log kept as one JSON array in a blob store.

    Appends are a read-modify-write of the whole array and are serialized on a
    per-store lock. Readers do not take the lock; the backend's atomic replace
    is what keeps them from seeing a partial write.
    """

    def __init__(
        self,
        blobs: BlobStore,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        key: str = LOG_KEY,
    ) -> None:
        if int(max_entries) < 1:
            raise ValueError("max_entries must be >= 1")
        self._blobs = blobs
        self._key = key
        self.max_entries = int(max_entries)
        self._lock = threading.Lock()

    def _decode(self, raw: bytes) -> list[NotificationEntry]:
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, list):
            raise TypeError(f"log blob must be a list, got {type(data).__name__}")
        return [NotificationEntry.from_dict(d) for d in data]

    @staticmethod
    def _encode(entries: list[NotificationEntry]) -> bytes:
        return json.dumps([e.to_dict() for e in entries], ensure_ascii=False).encode("utf-8")

    def _read(self) -> bytes | None:
        try:
            return self._blobs.get(self._key)
        except Exception as ex:
            metrics.store_read_failures.inc()
            raise LogStoreReadError(f"log store read failed: {ex}") from ex

    def load(self) -> list[NotificationEntry]:
        """
        Decode the log. A corrupt blob reads as empty; a backend failure raises
        LogStoreReadError.
        """
        raw = self._read()
        if raw is None:
            return []
        try:
            return self._decode(raw)
        except (ValueError, TypeError, KeyError, RecursionError) as ex:
            # UnicodeDecodeError and JSONDecodeError are ValueErrors; deeply
            # nested JSON exhausts the recursion limit.
            metrics.store_corrupt_loads.inc()
            logger.warning(
                "log_store_blob_corrupt",
                key=self._key,
                size=len(raw),
                error=f"{type(ex).__name__}: {ex}",
            )
            return []

    def append(self, entry: NotificationEntry) -> int:
        """
        Prepend `entry`, evict from the tail down to the cap, write back.

        Returns the log length after the write.
        """
        with metrics.time_hist(metrics.store_append_seconds), self._lock:
            try:
                entries = self.load()
            except LogStoreReadError as ex:
                # Writing over an unread log would lose it.
                metrics.store_write_failures.inc()
                raise LogStoreWriteError(f"log store append aborted: {ex}") from ex
            entries.insert(0, entry)
            evicted = max(0, len(entries) - self.max_entries)
            if evicted:
                del entries[self.max_entries :]
            blob = self._encode(entries)
            try:
                self._blobs.set(self._key, blob)
            except Exception as ex:
                metrics.store_write_failures.inc()
                raise LogStoreWriteError(f"log store write failed: {ex}") from ex
        metrics.store_entries.set(len(entries))
        if evicted:
            logger.debug("log_store_evicted", count=evicted, cap=self.max_entries)
        return len(entries)

    def clear(self) -> None:
        with self._lock:
            try:
                self._blobs.remove(self._key)
            except Exception as ex:
                metrics.store_write_failures.inc()
                raise LogStoreWriteError(f"log store clear failed: {ex}") from ex
        metrics.store_entries.set(0)
        logger.info("log_store_cleared", key=self._key)


def build_log_store() -> LogStore:
    s = get_settings()
    return LogStore(build_blob_store(), max_entries=int(s.max_entries))
