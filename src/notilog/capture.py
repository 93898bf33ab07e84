from __future__ import annotations

from collections.abc import Callable
from typing import Any

from notilog import extract
from notilog.errors import LogStoreWriteError
from notilog.log_store import LogStore, build_log_store
from notilog.models import NotificationEntry, PostedNotification
from notilog.notifier import ChangeNotifier, build_notifier
from notilog.ops import metrics
from notilog.resolver import SourceNameResolver, build_resolver
from notilog.utils.log import logger


class EventCapture:
    """
    Entry point for the host's notification listener.

    The host may call `on_posted` from any thread; the store serializes writes.
    Nothing here raises for bad payloads or a failing resolver: those degrade
    to defaults. A failed store write is logged and the change signal skipped.
    """

    def __init__(
        self,
        store: LogStore,
        notifier: ChangeNotifier,
        resolver: SourceNameResolver,
        *,
        extractor: Callable[[Any], tuple[str, str]] = extract.extract,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.resolver = resolver
        self._extract = extractor

    def resolve_source(self, package: str) -> str:
        try:
            label = self.resolver.resolve(package)
        except Exception as ex:
            logger.debug("capture_source_unresolved", package=package, error=type(ex).__name__)
            return package
        label = str(label or "").strip()
        return label or package

    def build_entry(self, payload: PostedNotification) -> NotificationEntry:
        short_text, full_text = self._extract(payload.extras)
        return NotificationEntry(
            source_id=self.resolve_source(payload.package),
            title=extract.title(payload.extras),
            short_text=short_text,
            full_text=full_text,
            timestamp=int(payload.post_time),
        )

    def on_posted(self, payload: PostedNotification, is_clearable: bool) -> NotificationEntry | None:
        if not is_clearable:
            metrics.notifications_dropped.labels(reason="ongoing").inc()
            logger.debug("capture_dropped_ongoing", package=payload.package)
            return None

        entry = self.build_entry(payload)
        try:
            size = self.store.append(entry)
        except LogStoreWriteError as ex:
            metrics.notifications_dropped.labels(reason="store_write").inc()
            logger.warning(
                "capture_store_write_failed",
                source_id=entry.source_id,
                post_time=entry.timestamp,
                error=str(ex),
            )
            return None

        metrics.notifications_captured.inc()
        logger.info(
            "capture_appended",
            source_id=entry.source_id,
            post_time=entry.timestamp,
            full_text_len=len(entry.full_text),
            log_size=size,
        )
        self.notifier.publish()
        return entry

    def on_removed(self, payload: PostedNotification) -> None:
        # Removal does not touch the log; entries outlive their notification.
        metrics.notifications_removed_seen.inc()
        logger.debug("capture_removed_seen", package=payload.package, key=payload.key)

    def handle(self, payload: PostedNotification) -> NotificationEntry | None:
        return self.on_posted(payload, payload.is_clearable)


def build_capture(
    store: LogStore | None = None,
    notifier: ChangeNotifier | None = None,
    resolver: SourceNameResolver | None = None,
) -> EventCapture:
    return EventCapture(
        store if store is not None else build_log_store(),
        notifier if notifier is not None else build_notifier(),
        resolver if resolver is not None else build_resolver(),
    )
