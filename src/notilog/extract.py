"""
Text extraction from notification extras.

Payloads arrive partially populated and occasionally malformed (a text-lines
field that is not a list, message bundles without text, numbers in text fields).
`extract` never raises: each field is read independently and anything it cannot
read counts as absent.

full_text precedence (first non-blank wins):
  1. big text
  2. text lines, newline-joined
  3. message list texts, newline-joined
  4. plain text
  5. UNREADABLE_CONTENT
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from notilog.models import (
    DEFAULT_TITLE,
    EXTRA_BIG_TEXT,
    EXTRA_MESSAGES,
    EXTRA_TEXT,
    EXTRA_TEXT_LINES,
    EXTRA_TITLE,
    MESSAGE_TEXT,
    UNREADABLE_CONTENT,
)


def _text(value: Any) -> str:
    # Only text-typed values count; numbers, bundles and the like read as absent.
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return ""


def _get(extras: Any, key: str) -> Any:
    if not isinstance(extras, Mapping):
        return None
    try:
        return extras.get(key)
    except Exception:
        return None


def _blank(s: str) -> bool:
    return not s.strip()


def plain_text(extras: Any) -> str:
    return _text(_get(extras, EXTRA_TEXT))


def big_text(extras: Any) -> str:
    return _text(_get(extras, EXTRA_BIG_TEXT))


def text_lines(extras: Any) -> str:
    lines = _get(extras, EXTRA_TEXT_LINES)
    if not isinstance(lines, (list, tuple)):
        return ""
    return "\n".join(_text(line) for line in lines if isinstance(line, (str, bytes)))


def message_texts(extras: Any) -> str:
    messages = _get(extras, EXTRA_MESSAGES)
    if not isinstance(messages, (list, tuple)):
        return ""
    parts: list[str] = []
    for msg in messages:
        if not isinstance(msg, Mapping):
            continue
        try:
            t = _text(msg.get(MESSAGE_TEXT))
        except Exception:
            continue
        if not _blank(t):
            parts.append(t)
    return "\n".join(parts)


_FULL_TEXT_CHAIN: tuple[Callable[[Any], str], ...] = (
    big_text,
    text_lines,
    message_texts,
    plain_text,
)


def full_text(extras: Any) -> str:
    for candidate in _FULL_TEXT_CHAIN:
        try:
            value = candidate(extras)
        except Exception:
            continue
        if not _blank(value):
            return value
    return UNREADABLE_CONTENT


def extract(extras: Any) -> tuple[str, str]:
    """
    Return (short_text, full_text) for a notification's extras.
    """
    try:
        short = plain_text(extras)
    except Exception:
        short = ""
    return short, full_text(extras)


def title(extras: Any) -> str:
    value = _get(extras, EXTRA_TITLE)
    if isinstance(value, (str, bytes)):
        return _text(value)
    return DEFAULT_TITLE
