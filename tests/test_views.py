from __future__ import annotations

from notilog import views
from notilog.models import NotificationEntry


def _e(source: str, ts: int) -> NotificationEntry:
    return NotificationEntry(source_id=source, title="t", short_text="", full_text="f", timestamp=ts)


def test_distinct_keeps_latest_per_source() -> None:
    log = [_e("A", 3), _e("B", 2), _e("A", 1)]
    assert views.distinct_by_source(log) == [_e("A", 3), _e("B", 2)]


def test_filter_keeps_order() -> None:
    log = [_e("A", 3), _e("B", 2), _e("A", 1)]
    assert views.filter_by_source(log, "A") == [_e("A", 3), _e("A", 1)]
    assert views.filter_by_source(log, "C") == []


def test_sources_and_empty_input() -> None:
    assert views.sources([_e("B", 9), _e("A", 3), _e("B", 1)]) == ["B", "A"]
    assert views.sources([]) == []
    assert views.distinct_by_source([]) == []
