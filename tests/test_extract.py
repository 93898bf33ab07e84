from __future__ import annotations

from notilog.extract import extract, title
from notilog.models import DEFAULT_TITLE, UNREADABLE_CONTENT


def test_big_text_wins_over_lines() -> None:
    extras = {
        "android.bigText": "B",
        "android.textLines": ["L1", "L2"],
        "android.text": "T",
    }
    assert extract(extras) == ("T", "B")


def test_lines_joined_in_order_when_no_big_text() -> None:
    assert extract({"android.textLines": ["L1", "L2"]}) == ("", "L1\nL2")


def test_plain_text_is_last_real_fallback() -> None:
    assert extract({"android.text": "T"}) == ("T", "T")


def test_nothing_yields_sentinel() -> None:
    assert extract({}) == ("", UNREADABLE_CONTENT)
    assert UNREADABLE_CONTENT == "can't read context"


def test_messages_skip_malformed_elements() -> None:
    extras = {
        "android.messages": [
            {"text": "hi"},
            {"sender": "bob"},  # no text
            "not a bundle",
            None,
            {"text": "   "},
            {"text": 42},
            {"text": "there"},
        ]
    }
    short, full = extract(extras)
    assert short == ""
    assert full == "hi\nthere"


def test_messages_used_only_after_lines() -> None:
    extras = {
        "android.textLines": ["line"],
        "android.messages": [{"text": "msg"}],
    }
    assert extract(extras)[1] == "line"


def test_blank_candidates_fall_through() -> None:
    extras = {
        "android.bigText": "  \n ",
        "android.textLines": [],
        "android.messages": [{"nope": 1}],
        "android.text": "plain",
    }
    assert extract(extras) == ("plain", "plain")


def test_wrong_types_do_not_raise() -> None:
    extras = {
        "android.bigText": ["not", "text"],
        "android.textLines": "L1",  # string, not an array
        "android.messages": {"text": "not a list"},
    }
    assert extract(extras) == ("", UNREADABLE_CONTENT)


def test_non_mapping_extras() -> None:
    assert extract(None) == ("", UNREADABLE_CONTENT)
    assert extract(["android.text"]) == ("", UNREADABLE_CONTENT)


def test_bytes_values_decoded() -> None:
    assert extract({"android.bigText": "é".encode()}) == ("", "é")


def test_title_defaults_only_when_absent() -> None:
    assert title({}) == DEFAULT_TITLE
    assert title({"android.title": None}) == DEFAULT_TITLE
    assert title({"android.title": {"x": 1}}) == DEFAULT_TITLE
    assert title({"android.title": "Alice"}) == "Alice"


def test_numbers_are_not_text() -> None:
    assert extract({"android.messages": [{"text": 42}, {"text": "ok"}]}) == ("", "ok")
    assert extract({"android.bigText": 3.5, "android.text": 7}) == ("", UNREADABLE_CONTENT)
    assert extract({"android.bigText": 1, "android.text": "T"}) == ("T", "T")
    assert extract({"android.textLines": ["a", 2, None, "b"]}) == ("", "a\nb")
