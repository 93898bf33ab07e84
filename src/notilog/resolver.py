from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from notilog.config import get_settings
from notilog.errors import ResolverError
from notilog.utils.log import logger


class SourceNameResolver(Protocol):
    def resolve(self, identifier: str) -> str: ...


class MappingResolver:
    """
    Identifier -> display label lookup over a fixed table.

    Unknown identifiers and blank labels raise ResolverError so the caller can
    fall back to the raw identifier.
    """

    def __init__(self, labels: Mapping[str, str] | None = None) -> None:
        self._labels = {str(k): str(v) for k, v in (labels or {}).items()}

    def __len__(self) -> int:
        return len(self._labels)

    def resolve(self, identifier: str) -> str:
        label = self._labels.get(identifier)
        if label is None:
            raise ResolverError(f"no label for {identifier!r}")
        label = label.strip()
        if not label:
            raise ResolverError(f"blank label for {identifier!r}")
        return label


def load_label_map(path: Path) -> dict[str, str]:
    """
    Read a JSON object of identifier -> label. Non-string values are skipped.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"label map must be a JSON object: {path}")
    out: dict[str, str] = {}
    for k, v in data.items():
        if isinstance(v, str):
            out[str(k)] = v
    return out


def build_resolver() -> MappingResolver:
    s = get_settings()
    path = getattr(s, "source_labels_path", None)
    if not path:
        return MappingResolver()
    try:
        labels = load_label_map(Path(path))
    except (OSError, ValueError) as ex:
        logger.warning("source_labels_unreadable", path=str(path), error=str(ex))
        return MappingResolver()
    logger.info("source_labels_loaded", path=str(path), count=len(labels))
    return MappingResolver(labels)
