from __future__ import annotations

from pathlib import Path

import pytest

from notilog.blob_store import MemoryBlobStore, SqliteBlobStore, build_blob_store
from notilog.config import get_settings


def test_sqlite_get_set_remove(tmp_path: Path) -> None:
    b = SqliteBlobStore(tmp_path / "nested" / "blobs.db")
    assert b.get("k") is None
    b.set("k", b"\x00\x01payload")
    assert b.get("k") == b"\x00\x01payload"
    b.set("k", b"v2")
    assert b.get("k") == b"v2"
    b.remove("k")
    assert b.get("k") is None
    # removing a missing key is a no-op
    b.remove("k")


def test_memory_get_set_remove() -> None:
    b = MemoryBlobStore()
    b.set("k", bytearray(b"abc"))
    assert b.get("k") == b"abc"
    b.remove("k")
    b.remove("k")
    assert b.get("k") is None


def test_build_blob_store_defaults_to_sqlite_under_state_dir() -> None:
    b = build_blob_store()
    assert isinstance(b, SqliteBlobStore)
    assert b.db_path == get_settings().db_path()


@pytest.mark.parametrize("backend,expected", [("memory", MemoryBlobStore), ("bogus", SqliteBlobStore)])
def test_build_blob_store_backend(monkeypatch: pytest.MonkeyPatch, backend: str, expected: type) -> None:
    monkeypatch.setenv("NOTILOG_STORE_BACKEND", backend)
    get_settings.cache_clear()
    assert isinstance(build_blob_store(), expected)
