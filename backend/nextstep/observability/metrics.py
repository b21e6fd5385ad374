"""Metrics recorded as short-lived Opik traces."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from nextstep.observability.tracing import trace

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record one value under `metric:<name>`; no-op when Opik is off."""
    payload: Dict[str, Any] = {"value": value, **(metadata or {})}

    try:
        with trace(f"metric:{name}", metadata=payload, tags=["metric"]):
            pass
    except Exception as exc:  # pragma: no cover - third-party failure
        logger.debug("Unable to record metric %s: %s", name, exc)


@contextmanager
def timed(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """Record the wall time of the block as `<name>.latency_ms`, even if it raises."""
    started = perf_counter()
    try:
        yield
    finally:
        log_metric(f"{name}.latency_ms", round((perf_counter() - started) * 1000, 3), metadata=metadata)
