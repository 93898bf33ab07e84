from __future__ import annotations

import json
from pathlib import Path

import pytest

from notilog.config import get_settings
from notilog.errors import ResolverError
from notilog.resolver import MappingResolver, build_resolver, load_label_map


def test_mapping_resolver() -> None:
    r = MappingResolver({"com.chat": " Chat ", "com.blank": ""})
    assert r.resolve("com.chat") == "Chat"
    with pytest.raises(ResolverError):
        r.resolve("com.blank")
    with pytest.raises(ResolverError):
        r.resolve("com.missing")


def test_load_label_map_skips_non_strings(tmp_path: Path) -> None:
    p = tmp_path / "labels.json"
    p.write_text(json.dumps({"a": "A", "b": 3, "c": None}), encoding="utf-8")
    assert load_label_map(p) == {"a": "A"}

    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_label_map(p)


def test_build_resolver_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / "labels.json"
    p.write_text(json.dumps({"com.chat": "Chat"}), encoding="utf-8")
    monkeypatch.setenv("NOTILOG_SOURCE_LABELS", str(p))
    get_settings.cache_clear()
    assert build_resolver().resolve("com.chat") == "Chat"


def test_build_resolver_unreadable_file_is_empty(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / "labels.json"
    p.write_text("{broken", encoding="utf-8")
    monkeypatch.setenv("NOTILOG_SOURCE_LABELS", str(p))
    get_settings.cache_clear()
    assert len(build_resolver()) == 0
