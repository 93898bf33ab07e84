from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _cwd_dir(name: str) -> Path:
    return (Path.cwd() / name).resolve()


class PublicConfig(BaseSettings):
    """
    Runtime config, all of it safe to print.

    Sources, later wins: defaults, `.env` in the working directory, process env.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- storage ---
    state_dir: Path = Field(default_factory=lambda: _cwd_dir("_state"), alias="NOTILOG_STATE_DIR")
    db_name: str = Field(default="notilog.db", alias="NOTILOG_DB_NAME")
    store_backend: str = Field(default="sqlite", alias="NOTILOG_STORE_BACKEND")  # sqlite|memory
    max_entries: int = Field(default=500, alias="NOTILOG_MAX_ENTRIES")

    # --- capture ---
    # JSON object: package identifier -> display label
    source_labels_path: Path | None = Field(default=None, alias="NOTILOG_SOURCE_LABELS")

    # --- change signal ---
    signal_name: str = Field(default="NEW_NOTIFICATION_EVENT", alias="NOTILOG_SIGNAL_NAME")
    notifier_workers: int = Field(default=4, alias="NOTILOG_NOTIFIER_WORKERS")

    # --- logging ---
    log_dir: Path = Field(default_factory=lambda: _cwd_dir("logs"), alias="LOG_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, alias="LOG_MAX_BYTES")
    log_backup_count: int = Field(default=3, alias="LOG_BACKUP_COUNT")

    # --- http ---
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8765, alias="PORT")

    def db_path(self) -> Path:
        return Path(self.state_dir) / (str(self.db_name).strip() or "notilog.db")
