import logging
from uuid import uuid4

from fastapi.testclient import TestClient


def _get_client() -> TestClient:
    from nextstep.main import app

    return TestClient(app)


def _access_records(caplog) -> list[logging.LogRecord]:
    return [record for record in caplog.records if record.name == "nextstep.access"]


def test_health_endpoint_returns_ok() -> None:
    response = _get_client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_caller_request_id_is_echoed() -> None:
    response = _get_client().get("/health", headers={"X-Request-Id": "req-from-phone"})

    assert response.headers.get("X-Request-Id") == "req-from-phone"


def test_access_line_carries_request_and_user(caplog) -> None:
    user_id = str(uuid4())
    caplog.set_level(logging.INFO, logger="nextstep.access")

    response = _get_client().get("/health", params={"user_id": user_id}, headers={"X-Request-Id": "req-42"})

    records = _access_records(caplog)
    assert len(records) == 1
    assert records[0].request_id == "req-42"
    assert records[0].user_id == user_id
    assert "GET /health -> 200" in records[0].getMessage()
    assert response.headers["X-Request-Id"] == "req-42"


def test_generated_request_id_matches_access_line(caplog) -> None:
    caplog.set_level(logging.INFO, logger="nextstep.access")

    response = _get_client().get("/health")

    record = _access_records(caplog)[0]
    assert record.request_id == response.headers["X-Request-Id"]
    assert record.user_id == "-"


def test_access_line_records_error_status(caplog) -> None:
    caplog.set_level(logging.INFO, logger="nextstep.access")

    response = _get_client().get("/no-such-route")

    assert response.status_code == 404
    assert "GET /no-such-route -> 404" in _access_records(caplog)[0].getMessage()
