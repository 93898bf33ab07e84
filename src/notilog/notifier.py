"""
Payload-less change signal.

Subscribers are told "the log may have changed" and re-read it themselves; the
signal carries no data and nothing is queued or replayed. A subscriber that
registers late, or misses a signal, resyncs by loading the log on its own
start/resume.

Handlers run through `dispatch` so `publish` never waits on them. The default
dispatch is a small thread pool; a subscriber that must run somewhere specific
(an asyncio loop, a UI thread) hops there from its handler.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from notilog.config import get_settings
from notilog.ops import metrics
from notilog.utils.log import logger

DEFAULT_SIGNAL = "NEW_NOTIFICATION_EVENT"

Handler = Callable[[], Any]
Dispatch = Callable[[Callable[[], None]], Any]


def inline_dispatch(fn: Callable[[], None]) -> None:
    fn()


@dataclass(frozen=True, slots=True)
class Subscription:
    id: int
    channel: str


class ChangeNotifier:
    def __init__(
        self,
        name: str = DEFAULT_SIGNAL,
        *,
        dispatch: Dispatch | None = None,
        max_workers: int = 4,
    ) -> None:
        self.name = name
        self._handlers: dict[int, Handler] = {}
        # Subscriptions with a dispatched run that has not started yet.
        self._pending: set[int] = set()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        if dispatch is None:
            self._executor = ThreadPoolExecutor(
                max_workers=max(1, int(max_workers)), thread_name_prefix="notilog-signal"
            )
            dispatch = self._executor.submit
        self._dispatch = dispatch

    def subscribe(self, handler: Handler) -> Subscription:
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            sub = Subscription(id=next(self._ids), channel=self.name)
            self._handlers[sub.id] = handler
        return sub

    def unsubscribe(self, sub: Subscription) -> bool:
        with self._lock:
            self._pending.discard(sub.id)
            return self._handlers.pop(sub.id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def _run(self, sub_id: int, handler: Handler) -> None:
        with self._lock:
            self._pending.discard(sub_id)
        try:
            handler()
        except Exception:
            metrics.subscriber_errors.inc()
            logger.exception("change_signal_handler_failed", channel=self.name, subscription=sub_id)

    def publish(self) -> int:
        """
        Signal every handler registered right now. Returns how many runs were
        dispatched.

        A subscriber whose previous run is still queued is skipped: one queued
        run already tells it to re-read, so a stuck handler holds at most one
        waiting run.
        """
        with self._lock:
            targets = [(i, h) for i, h in self._handlers.items() if i not in self._pending]
            self._pending.update(i for i, _ in targets)
        metrics.signals_published.inc()
        sent = 0
        for sub_id, handler in targets:
            try:
                self._dispatch(lambda sub_id=sub_id, handler=handler: self._run(sub_id, handler))
            except RuntimeError as ex:
                # Executor shut down; delivery is best-effort.
                with self._lock:
                    self._pending.discard(sub_id)
                logger.warning("change_signal_dispatch_failed", channel=self.name, error=str(ex))
                continue
            sent += 1
        return sent

    def close(self) -> None:
        with self._lock:
            self._handlers.clear()
            self._pending.clear()
        if self._executor is not None:
            self._executor.shutdown(wait=False)


def build_notifier() -> ChangeNotifier:
    s = get_settings()
    return ChangeNotifier(str(s.signal_name), max_workers=int(s.notifier_workers))
