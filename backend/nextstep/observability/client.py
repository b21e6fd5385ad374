"""Process-wide Opik client.

Opik is an optional dependency (the ``observability`` extra). Without it, or
with ``OPIK_ENABLED`` unset, every helper here returns None and tracing
becomes a no-op.
"""
from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Dict, Optional

from nextstep.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_client: Optional["Opik"] = None
_client_lock = Lock()
_init_attempted = False


def _client_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {"project_name": settings.opik_project, "api_key": settings.opik_api_key}
    if settings.opik_workspace:
        options["workspace"] = settings.opik_workspace
    if settings.opik_host:
        options["host"] = settings.opik_host
    return options


def init_opik() -> Optional["Opik"]:
    """Build the client on the first call only; a failed attempt is not retried."""
    global _client, _init_attempted

    if Opik is None:
        return None

    with _client_lock:
        if _client is not None or _init_attempted:
            return _client
        _init_attempted = True

        if not settings.opik_enabled:
            logger.debug("Opik disabled; session and task traces are not exported.")
            return None
        if not settings.opik_api_key:
            logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; traces are not exported.")
            return None

        try:
            _client = Opik(**_client_options())
        except Exception as exc:  # pragma: no cover - third-party init
            logger.warning("Opik client init failed, tracing disabled: %s", exc)
            return None

    logger.info("Opik enabled (project=%s, workspace=%s).", settings.opik_project, settings.opik_workspace or "default")
    return _client


def get_opik_client() -> Optional["Opik"]:
    if _client is not None:
        return _client
    return init_opik()


def reset_opik_client() -> None:
    """Forget the cached client so the next call re-reads settings."""
    global _client, _init_attempted

    with _client_lock:
        _client = None
        _init_attempted = False
