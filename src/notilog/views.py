"""
Read-side projections over a loaded (newest-first) log.

All functions are pure and keep the input order.
"""

from __future__ import annotations

from collections.abc import Iterable

from notilog.models import NotificationEntry


def distinct_by_source(entries: Iterable[NotificationEntry]) -> list[NotificationEntry]:
    """
    Latest entry per source.
    """
    seen: set[str] = set()
    out: list[NotificationEntry] = []
    for e in entries:
        if e.source_id in seen:
            continue
        seen.add(e.source_id)
        out.append(e)
    return out


def filter_by_source(entries: Iterable[NotificationEntry], source_id: str) -> list[NotificationEntry]:
    return [e for e in entries if e.source_id == source_id]


def sources(entries: Iterable[NotificationEntry]) -> list[str]:
    return [e.source_id for e in distinct_by_source(entries)]
