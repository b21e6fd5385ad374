"""Tests for metrics helpers."""
from __future__ import annotations

from typing import Any, Dict

from nextstep.observability import metrics
from nextstep.observability import tracing
from nextstep.services import analytics


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None, **kwargs: Any):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("demo_metric", 42, metadata={"foo": "bar"})

    assert dummy_client.traces, "Metric call should record a trace"
    assert dummy_client.traces[0].metadata["value"] == 42
    assert dummy_client.traces[0].metadata["foo"] == "bar"
    assert dummy_client.traces[0].ended is True


def test_track_records_analytics_metric_without_empty_fields(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    analytics.track("task_created", task_id="t-1", category=None)

    assert dummy_client.traces[0].name == "metric:analytics.task_created"
    assert dummy_client.traces[0].metadata == {"value": 1, "task_id": "t-1"}


def test_log_metric_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    metrics.log_metric("demo_metric", 1)


def test_timed_records_latency_even_on_error(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    try:
        with metrics.timed("session.start", metadata={"user_id": "u-1"}):
            raise RuntimeError("storage down")
    except RuntimeError:
        pass

    assert dummy_client.traces[0].name == "metric:session.start.latency_ms"
    assert dummy_client.traces[0].metadata["user_id"] == "u-1"
    assert dummy_client.traces[0].metadata["value"] >= 0
