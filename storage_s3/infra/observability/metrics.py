import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

from storage_s3.common.config import get_settings

# Low-cardinality labels only: the operation name, never the object key
OPERATIONS = Counter(
    "storage_operations_total",
    "Total object storage operations",
    ["operation", "outcome"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Object storage operation latency in seconds",
    ["operation"],
)


@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """Record outcome and latency of the wrapped storage call."""
    if not get_settings().ENABLE_METRICS:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    except Exception:
        OPERATIONS.labels(operation, "error").inc()
        raise
    else:
        OPERATIONS.labels(operation, "success").inc()
    finally:
        LATENCY.labels(operation).observe(time.perf_counter() - start)
