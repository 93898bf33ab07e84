from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager, suppress

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

REGISTRY = CollectorRegistry()

# Append is a whole-log rewrite; buckets stay in the sub-second range.
STORE_BUCKETS = (0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)

# Capture
notifications_captured = Counter(
    "notilog_notifications_captured_total", "Posted notifications appended to the log", registry=REGISTRY
)
notifications_dropped = Counter(
    "notilog_notifications_dropped_total",
    "Posted notifications not appended, by reason",
    labelnames=("reason",),
    registry=REGISTRY,
)
notifications_removed_seen = Counter(
    "notilog_notifications_removed_seen_total", "Removal events observed", registry=REGISTRY
)

# Store
store_write_failures = Counter(
    "notilog_store_write_failures_total", "Log store blob writes that failed", registry=REGISTRY
)
store_corrupt_loads = Counter(
    "notilog_store_corrupt_loads_total", "Loads that found an undecodable blob", registry=REGISTRY
)
store_read_failures = Counter(
    "notilog_store_read_failures_total", "Log store blob reads that failed", registry=REGISTRY
)
store_entries = Gauge("notilog_store_entries", "Entries in the log after the last write", registry=REGISTRY)
store_append_seconds = Histogram(
    "notilog_store_append_seconds", "Log store append latency (seconds)", registry=REGISTRY, buckets=STORE_BUCKETS
)

# Change signal
signals_published = Counter("notilog_signals_published_total", "Change signals published", registry=REGISTRY)
subscriber_errors = Counter(
    "notilog_subscriber_errors_total", "Change signal handlers that raised", registry=REGISTRY
)


@contextmanager
def time_hist(h: Histogram) -> Iterator[None]:
    """
    Observe the wall time of the block into `h`, also when it raises.
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        with suppress(Exception):
            h.observe(max(0.0, time.perf_counter() - t0))
