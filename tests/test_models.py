from __future__ import annotations

import re

import pytest

from notilog.models import NotificationEntry, PostedNotification


def test_entry_from_dict_is_strict() -> None:
    good = {"source_id": "a", "title": "t", "short_text": "", "full_text": "f", "timestamp": 5}
    assert NotificationEntry.from_dict(good).timestamp == 5

    with pytest.raises(KeyError):
        NotificationEntry.from_dict({k: v for k, v in good.items() if k != "title"})
    with pytest.raises(TypeError):
        NotificationEntry.from_dict({**good, "timestamp": True})
    with pytest.raises(TypeError):
        NotificationEntry.from_dict({**good, "timestamp": 1.5})
    with pytest.raises(TypeError):
        NotificationEntry.from_dict({**good, "full_text": None})
    with pytest.raises(TypeError):
        NotificationEntry.from_dict(["a"])  # type: ignore[arg-type]


def test_formatted_time_shape() -> None:
    e = NotificationEntry(source_id="a", title="t", short_text="", full_text="f", timestamp=1_700_000_000_000)
    assert re.fullmatch(r"[A-Z][a-z]{2} \d{2}, \d{4} \d{2}:\d{2}:\d{2}", e.formatted_time())


def test_posted_from_dict_defaults() -> None:
    p = PostedNotification.from_dict({"package": " com.chat ", "post_time": "42", "extras": "junk"})
    assert p.package == "com.chat"
    assert p.post_time == 42
    assert p.is_clearable is True
    assert p.extras == {}

    p = PostedNotification.from_dict({"package": "x", "post_time": 1, "clearable": False, "key": "k1"})
    assert p.is_clearable is False
    assert p.key == "k1"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"package": "", "post_time": 1},
        {"package": "x"},
        {"package": "x", "post_time": True},
        {"package": "x", "post_time": "soon"},
    ],
)
def test_posted_from_dict_rejects(payload) -> None:
    with pytest.raises(ValueError):
        PostedNotification.from_dict(payload)
