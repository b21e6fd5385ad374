"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib
import logging

import pytest


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import nextstep.core.config as core_config
    import nextstep.observability.client as client_module
    import nextstep.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")


def test_client_stays_off_without_api_key(monkeypatch) -> None:
    from nextstep.observability import client as client_module

    class _NeverBuilt:
        def __init__(self, *args, **kwargs):
            raise AssertionError("Opik must not be constructed without an API key")

    monkeypatch.setattr(client_module, "Opik", _NeverBuilt)
    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", None)
    client_module.reset_opik_client()
    try:
        assert client_module.get_opik_client() is None
    finally:
        client_module.reset_opik_client()


class _Trace:
    def __init__(self, metadata=None):
        self.metadata = metadata or {}
        self.error_info = None
        self.ended = False

    def update(self, metadata=None, error_info=None, **kwargs):
        if metadata:
            self.metadata = {**self.metadata, **metadata}
        if error_info:
            self.error_info = error_info

    def end(self):
        self.ended = True


class _Client:
    def __init__(self):
        self.traces = []

    def trace(self, name, metadata=None, **kwargs):
        recorded = _Trace(metadata)
        self.traces.append(recorded)
        return recorded


def test_trace_reraises_and_records_error(monkeypatch) -> None:
    from nextstep.observability import tracing

    client = _Client()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: client)

    with pytest.raises(ValueError):
        with tracing.trace("session.start", metadata={"task_id": "t-1"}):
            raise ValueError("boom")

    recorded = client.traces[0]
    assert recorded.error_info == {"exception_type": "ValueError", "message": "boom"}
    assert recorded.ended is True


def test_annotate_drops_empty_values(monkeypatch) -> None:
    from nextstep.observability import tracing

    client = _Client()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: client)

    with tracing.trace("task.steps.regenerate", user_id="u-1", request_id="r-1") as span:
        tracing.annotate(span, step_count=5, template_id=None)

    assert client.traces[0].metadata == {"user_id": "u-1", "request_id": "r-1", "step_count": 5}
    tracing.annotate(None, step_count=5)


def test_log_records_carry_request_context() -> None:
    from nextstep.core.context import request_id_ctx_var, user_id_ctx_var
    from nextstep.core.logging import RequestContextFilter

    record = logging.LogRecord("nextstep", logging.INFO, __file__, 1, "hello", None, None)
    request_token = request_id_ctx_var.set("req-1")
    user_token = user_id_ctx_var.set("user-1")
    try:
        RequestContextFilter().filter(record)
    finally:
        user_id_ctx_var.reset(user_token)
        request_id_ctx_var.reset(request_token)

    assert record.request_id == "req-1"
    assert record.user_id == "user-1"
