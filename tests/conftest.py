from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator

import pytest

# Logging is configured on first import of notilog.utils.log, which happens at
# collection time; keep its file handler out of the working tree.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="notilog_logs_"))

from notilog.config import get_settings  # noqa: E402
from notilog.log_store import LogStore  # noqa: E402
from notilog.blob_store import MemoryBlobStore  # noqa: E402
from notilog.notifier import ChangeNotifier, inline_dispatch  # noqa: E402


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    root = tmp_path_factory.mktemp("notilog_test")
    (root / "_state").mkdir(parents=True, exist_ok=True)
    (root / "logs").mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("NOTILOG_STATE_DIR", str(root / "_state"))
    monkeypatch.setenv("LOG_DIR", str(root / "logs"))
    monkeypatch.setenv("NOTILOG_STORE_BACKEND", "sqlite")
    monkeypatch.delenv("NOTILOG_SOURCE_LABELS", raising=False)
    monkeypatch.delenv("NOTILOG_MAX_ENTRIES", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def store(blobs: MemoryBlobStore) -> LogStore:
    return LogStore(blobs)


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier(dispatch=inline_dispatch)
