"""Product analytics events.

Events go to the application log and, when Opik is enabled, are recorded as
metrics. They describe what the user did, never the content they typed.
"""
from __future__ import annotations

import logging
from typing import Any, Literal

from nextstep.observability.metrics import log_metric

logger = logging.getLogger(__name__)

AnalyticsEvent = Literal[
    "task_created",
    "template_used",
    "template_regenerated",
    "session_started",
    "session_start_hour",
    "session_completed",
    "session_abandoned",
    "microstep_completed",
    "microstep_skipped",
    "microstep_made_smaller",
]


def track(event: AnalyticsEvent, **fields: Any) -> None:
    metadata = {key: value for key, value in fields.items() if value is not None}
    logger.info("analytics %s %s", event, metadata)
    log_metric(f"analytics.{event}", 1, metadata=metadata)
