from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from .public_config import PublicConfig

STORE_BACKENDS = ("sqlite", "memory")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Attribute access falls through to the public config.
    """

    public: PublicConfig

    def __getattr__(self, name: str) -> Any:
        return getattr(self.public, name)

    def db_path(self) -> Path:
        return self.public.db_path()


def _check(pub: PublicConfig) -> None:
    """
    Values that would break the log invariants are fatal; the rest only warn.
    """
    if pub.max_entries < 1:
        raise ConfigError(f"NOTILOG_MAX_ENTRIES must be >= 1, got {pub.max_entries}")
    if pub.notifier_workers < 1:
        raise ConfigError(f"NOTILOG_NOTIFIER_WORKERS must be >= 1, got {pub.notifier_workers}")
    if not pub.signal_name.strip():
        raise ConfigError("NOTILOG_SIGNAL_NAME must not be blank")

    # structlog is configured from these settings, so warn through stdlib here.
    log = logging.getLogger("notilog.config")
    if pub.store_backend.strip().lower() not in STORE_BACKENDS:
        log.warning("store_backend_unknown", extra={"value": pub.store_backend})
    if pub.source_labels_path is not None and not Path(pub.source_labels_path).is_file():
        log.warning("source_labels_missing", extra={"path": str(pub.source_labels_path)})


def get_safe_config_report() -> dict[str, Any]:
    """
    JSON-ready settings dump; paths become strings.
    """
    s = get_settings()
    report = {
        k: (str(v) if isinstance(v, Path) else v) for k, v in s.public.model_dump().items()
    }
    report["db_path"] = str(s.db_path())
    return {"public": report}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    pub = PublicConfig()
    _check(pub)
    return Settings(public=pub)
