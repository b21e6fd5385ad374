from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nextstep.db.deps import get_db
from nextstep.db.models.storage_blob import StorageBlob
from nextstep.db.models.user import User
from nextstep.main import app


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    User.__table__.create(bind=engine)
    StorageBlob.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _start_session(client: TestClient, user_id, title: str = "Do the dishes") -> dict:
    params = {"user_id": str(user_id)}
    task = client.post("/tasks", params=params, json={"title": title, "category": "home"}).json()["task"]
    response = client.post("/sessions", params=params, json={"task_id": task["id"]})
    assert response.status_code == 201
    return response.json()


def _step_action(client: TestClient, user_id, session_id: str, step_id: str, action: str) -> dict:
    response = client.post(
        f"/sessions/{session_id}/steps/{step_id}/{action}",
        params={"user_id": str(user_id)},
    )
    assert response.status_code == 200
    return response.json()


def test_no_active_session_initially(client):
    body = client.get("/sessions/active", params={"user_id": str(uuid4())}).json()

    assert body["outcome"] == "idle"
    assert body["session"] is None
    assert body["current_step"] is None


def test_start_session_returns_first_step(client):
    user_id = uuid4()

    body = _start_session(client, user_id)

    assert body["outcome"] == "started"
    session = body["session"]
    assert len(session["micro_steps"]) == 6
    assert body["current_step"]["id"] == session["micro_steps"][0]["id"]
    assert body["suggest_break"] is False

    active = client.get("/sessions/active", params={"user_id": str(user_id)}).json()
    assert active["outcome"] == "active"
    assert active["session"]["id"] == session["id"]


def test_start_session_for_missing_task(client):
    response = client.post("/sessions", params={"user_id": str(uuid4())}, json={"task_id": "missing"})

    assert response.status_code == 404


def test_full_run_suggests_break_and_records_history(client):
    user_id = uuid4()
    session = _start_session(client, user_id)["session"]
    steps = session["micro_steps"]

    bodies = [_step_action(client, user_id, session["id"], step["id"], "complete") for step in steps]

    assert bodies[2]["suggest_break"] is True
    assert bodies[2]["break_minutes"] == 2
    assert bodies[3]["suggest_break"] is False
    final = bodies[-1]
    assert final["outcome"] == "completed"
    assert final["session"] is None
    assert final["finished"]["status"] == "completed"

    history = client.get("/sessions/history", params={"user_id": str(user_id)}).json()["sessions"]
    assert [entry["id"] for entry in history] == [session["id"]]
    assert client.get("/sessions/active", params={"user_id": str(user_id)}).json()["outcome"] == "idle"


def test_skipping_everything_leaves_no_history(client):
    user_id = uuid4()
    session = _start_session(client, user_id)["session"]

    bodies = [_step_action(client, user_id, session["id"], step["id"], "skip") for step in session["micro_steps"]]

    assert bodies[-1]["outcome"] == "exhausted"
    assert client.get("/sessions/history", params={"user_id": str(user_id)}).json()["sessions"] == []
    assert client.get("/insights", params={"user_id": str(user_id)}).json()["insights"]["total_sessions_completed"] == 0


def test_shrink_step(client):
    user_id = uuid4()
    session = _start_session(client, user_id)["session"]
    first = session["micro_steps"][0]

    body = _step_action(client, user_id, session["id"], first["id"], "shrink")

    assert body["outcome"] == "shrunk"
    assert body["current_step"]["suggested_minutes"] == 1
    assert body["current_step"]["id"] != first["id"]


def test_end_session_abandons(client):
    user_id = uuid4()
    session = _start_session(client, user_id)["session"]

    response = client.post(
        f"/sessions/{session['id']}/end",
        params={"user_id": str(user_id)},
        json={"completed": False},
    )

    assert response.status_code == 200
    assert response.json()["outcome"] == "ended"
    assert client.get("/sessions/history", params={"user_id": str(user_id)}).json()["sessions"] == []


def test_actions_on_stale_session_are_ignored(client):
    user_id = uuid4()
    session = _start_session(client, user_id)["session"]

    body = _step_action(client, user_id, "not-the-session", session["micro_steps"][0]["id"], "complete")

    assert body["outcome"] == "ignored"
    assert body["session"]["id"] == session["id"]
    assert body["session"]["completed_steps"] == []
