"""Metric helpers recorded as short Opik traces."""
from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from dayplan.observability.tracing import trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric value; a no-op when tracing is disabled."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)
    with trace(f"metric:{name}", metadata=payload):
        pass


@contextmanager
def latency_metric(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """Record the wall time of the block as `<name>` in milliseconds, even on error."""
    start = perf_counter()
    try:
        yield
    finally:
        log_metric(name, (perf_counter() - start) * 1000, metadata=metadata)
