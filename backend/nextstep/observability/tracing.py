"""Tracing utilities wrapping Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Sequence

from nextstep.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _clean(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {key: value for key, value in (metadata or {}).items() if value is not None}


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Wrap a unit of work (a route body, a session transition) in an Opik trace.

    Yields the trace so callers can attach extra metadata, or None when Opik
    is disabled. Errors raised inside the block are attached to the trace and
    re-raised unchanged.
    """
    client = get_opik_client()
    opik_trace: Optional["Trace"] = None

    if client:
        trace_metadata = _clean(metadata)
        if user_id:
            trace_metadata.setdefault("user_id", str(user_id))
        if request_id:
            trace_metadata.setdefault("request_id", request_id)
        options: Dict[str, Any] = {"name": name, "metadata": trace_metadata or None}
        if tags:
            options["tags"] = list(tags)
        try:
            opik_trace = client.trace(**options)
        except Exception as exc:  # pragma: no cover - third-party failure
            logger.debug("Unable to start Opik trace %s: %s", name, exc)
            opik_trace = None

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace:
            try:
                opik_trace.update(error_info={"exception_type": type(exc).__name__, "message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        if opik_trace:
            try:
                opik_trace.end()
            except Exception:  # pragma: no cover
                logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)


def annotate(span: Optional["Trace"], **metadata: Any) -> None:
    """Attach result metadata to a trace yielded by `trace`; no-op without one."""
    if span is None:
        return
    try:
        span.update(metadata=_clean(metadata))
    except Exception:  # pragma: no cover - third-party failure
        logger.debug("Failed to annotate Opik trace", exc_info=True)
