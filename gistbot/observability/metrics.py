# gistbot/observability/metrics.py
# minimal prometheus instrumentation for the gist store

from __future__ import annotations

from prometheus_client import Counter


OPERATIONS = Counter(
    "gist_store_operations_total",
    "Gist store operations by outcome",
    labelnames=("operation", "outcome"),
)

PURGED = Counter(
    "gist_purged_total",
    "Ephemeral gists removed by purge runs",
)


def record_operation(operation: str, outcome: str = "ok") -> None:
    OPERATIONS.labels(operation, outcome).inc()
