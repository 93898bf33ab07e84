from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

DEFAULT_TITLE = "System Notification"
UNREADABLE_CONTENT = "can't read context"

# Extras keys as delivered by the platform notification listener.
EXTRA_TITLE = "android.title"
EXTRA_TEXT = "android.text"
EXTRA_BIG_TEXT = "android.bigText"
EXTRA_TEXT_LINES = "android.textLines"
EXTRA_MESSAGES = "android.messages"
MESSAGE_TEXT = "text"

DISPLAY_TIME_FORMAT = "%b %d, %Y %H:%M:%S"


@dataclass(frozen=True, slots=True)
class NotificationEntry:
    source_id: str
    title: str
    short_text: str
    full_text: str
    timestamp: int  # epoch millis, from the posting platform

    def to_dict(self) -> dict[str, Any]:
        # Field order is the persisted record layout.
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> NotificationEntry:
        """
        Strict decode of a persisted record; raises on missing or mistyped fields.
        """
        if not isinstance(d, Mapping):
            raise TypeError(f"entry must be an object, got {type(d).__name__}")
        ts = d["timestamp"]
        if isinstance(ts, bool) or not isinstance(ts, int):
            raise TypeError("timestamp must be an integer")
        fields = {}
        for name in ("source_id", "title", "short_text", "full_text"):
            v = d[name]
            if not isinstance(v, str):
                raise TypeError(f"{name} must be a string")
            fields[name] = v
        return cls(timestamp=ts, **fields)

    def formatted_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp / 1000.0).strftime(DISPLAY_TIME_FORMAT)


@dataclass(frozen=True, slots=True)
class PostedNotification:
    """
    One event as handed over by the host's notification listener.
    """

    package: str
    post_time: int
    is_clearable: bool = True
    extras: Mapping[str, Any] = field(default_factory=dict)
    key: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> PostedNotification:
        if not isinstance(d, Mapping):
            raise ValueError("payload must be an object")
        package = str(d.get("package") or "").strip()
        if not package:
            raise ValueError("package required")
        raw_time = d.get("post_time")
        if raw_time is None or isinstance(raw_time, bool):
            raise ValueError("post_time required")
        try:
            post_time = int(raw_time)
        except (TypeError, ValueError):
            raise ValueError("post_time must be epoch milliseconds") from None
        extras = d.get("extras")
        return cls(
            package=package,
            post_time=post_time,
            is_clearable=bool(d.get("clearable", True)),
            extras=dict(extras) if isinstance(extras, Mapping) else {},
            key=str(d.get("key") or ""),
        )
