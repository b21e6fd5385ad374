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


def test_preferences_default(client):
    body = client.get("/preferences", params={"user_id": str(uuid4())}).json()

    preferences = body["preferences"]
    assert preferences["preferred_step_length_minutes"] == 3
    assert preferences["break_after_steps"] == 3
    assert preferences["break_minutes"] == 2
    assert preferences["quiet_hours_start"] == "22:00"
    assert preferences["quiet_hours_end"] == "08:00"
    assert preferences["nudge_times"] == ["09:00", "14:00"]
    assert preferences["micro_step_detail_level"] == "simple"
    assert preferences["theme"] == "system"


def test_patch_preferences_merges(client):
    params = {"user_id": str(uuid4())}

    first = client.patch("/preferences", params=params, json={"break_after_steps": 2})
    second = client.patch("/preferences", params=params, json={"theme": "dark"})

    assert first.status_code == 200
    assert second.json()["saved"] is True
    preferences = client.get("/preferences", params=params).json()["preferences"]
    assert preferences["break_after_steps"] == 2
    assert preferences["theme"] == "dark"


def test_break_cadence_follows_preferences(client):
    user_id = uuid4()
    params = {"user_id": str(user_id)}
    client.patch("/preferences", params=params, json={"break_after_steps": 2, "break_minutes": 5})
    task = client.post("/tasks", params=params, json={"title": "Laundry"}).json()["task"]
    session = client.post("/sessions", params=params, json={"task_id": task["id"]}).json()["session"]

    steps = session["micro_steps"]
    client.post(f"/sessions/{session['id']}/steps/{steps[0]['id']}/complete", params=params)
    body = client.post(f"/sessions/{session['id']}/steps/{steps[1]['id']}/complete", params=params).json()

    assert body["suggest_break"] is True
    assert body["break_minutes"] == 5


def test_invalid_quiet_hours_rejected(client):
    response = client.patch("/preferences", params={"user_id": str(uuid4())}, json={"quiet_hours_start": "25:00"})

    assert response.status_code == 422


@pytest.mark.parametrize("field", ["break_after_steps", "theme", "nudge_times", "timer_enabled"])
def test_null_for_required_preference_rejected(client, field):
    params = {"user_id": str(uuid4())}

    response = client.patch("/preferences", params=params, json={field: None})

    assert response.status_code == 422
    assert client.get("/preferences", params=params).json()["preferences"]["break_after_steps"] == 3


def test_quiet_hours_can_be_cleared(client):
    params = {"user_id": str(uuid4())}

    response = client.patch("/preferences", params=params, json={"quiet_hours_start": None})

    assert response.status_code == 200
    assert response.json()["preferences"]["quiet_hours_start"] is None


def test_invalid_nudge_time_rejected(client):
    response = client.patch("/preferences", params={"user_id": str(uuid4())}, json={"nudge_times": ["09:00", "9am"]})

    assert response.status_code == 422
