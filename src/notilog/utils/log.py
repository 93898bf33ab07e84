from __future__ import annotations

import logging
import sys
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from notilog.config import get_settings

LOGGER_NAME = "notilog"
LOG_FILE_NAME = "notilog.log"

# Event fields that may carry notification content; only their size is logged.
_CONTENT_KEYS = frozenset({"title", "short_text", "full_text", "text", "extras"})


def scrub_content(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    for k in _CONTENT_KEYS.intersection(event_dict):
        v = event_dict[k]
        try:
            event_dict[k] = f"<{len(v)} {'chars' if isinstance(v, str) else 'items'}>"
        except TypeError:
            event_dict[k] = "<scrubbed>"
    return event_dict


def rename_event_to_msg(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "event" in event_dict and "msg" not in event_dict:
        event_dict["msg"] = event_dict.pop("event")
    return event_dict


def _common_chain() -> list[Any]:
    # Shared by structlog loggers and records from plain `logging` callers.
    return [
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.stdlib.add_log_level,
        scrub_content,
        structlog.processors.format_exc_info,
        rename_event_to_msg,
    ]


def _handlers(formatter: logging.Formatter) -> list[logging.Handler]:
    s = get_settings()
    out: list[logging.Handler] = []
    path = Path(s.log_dir) / LOG_FILE_NAME
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        out.append(
            RotatingFileHandler(
                filename=str(path),
                maxBytes=int(s.log_max_bytes),
                backupCount=int(s.log_backup_count),
                encoding="utf-8",
            )
        )
    except OSError:
        # Unwritable log dir: stdout only.
        pass
    out.append(logging.StreamHandler(sys.stdout))
    for h in out:
        h.setFormatter(formatter)
    return out


def _configure_structlog() -> structlog.stdlib.BoundLogger:
    root = logging.getLogger()
    root.setLevel(str(get_settings().log_level).upper())

    # Configure once per process
    if getattr(root, "_notilog_structlog_configured", False):
        return structlog.get_logger(LOGGER_NAME)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=_common_chain(),
    )
    root.handlers.clear()
    for h in _handlers(formatter):
        root.addHandler(h)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *_common_chain(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root._notilog_structlog_configured = True
    return structlog.get_logger(LOGGER_NAME)


logger = _configure_structlog()


def set_log_level(level: str) -> None:
    """
    Override the level for this process (CLI `--log-level`).
    Handlers stay as configured; only filtering changes.
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    logging.getLogger().setLevel(lvl)
    for h in logging.getLogger().handlers:
        with suppress(Exception):
            h.setLevel(lvl)
