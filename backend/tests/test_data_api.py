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


def test_export_contains_everything(client):
    params = {"user_id": str(uuid4())}
    client.post("/tasks", params=params, json={"title": "Dishes"})
    client.patch("/preferences", params=params, json={"theme": "light"})

    body = client.get("/data/export", params=params).json()

    assert body["version"] == 1
    assert body["exported_at"]
    assert [task["title"] for task in body["tasks"]] == ["Dishes"]
    assert body["templates"] == []
    assert body["sessions"] == []
    assert body["routines"] == []
    assert body["preferences"]["theme"] == "light"
    assert body["insights"] is None


def test_clear_data_removes_everything(client):
    params = {"user_id": str(uuid4())}
    client.post("/tasks", params=params, json={"title": "Dishes"})
    client.patch("/preferences", params=params, json={"theme": "dark"})

    response = client.delete("/data", params=params)

    assert response.status_code == 200
    assert response.json()["cleared"] is True
    assert client.get("/tasks", params=params).json()["tasks"] == []
    assert client.get("/preferences", params=params).json()["preferences"]["theme"] == "system"


def test_clear_data_leaves_other_users_alone(client):
    mine = {"user_id": str(uuid4())}
    theirs = {"user_id": str(uuid4())}
    client.post("/tasks", params=mine, json={"title": "Mine"})
    client.post("/tasks", params=theirs, json={"title": "Theirs"})

    client.delete("/data", params=mine)

    assert [task["title"] for task in client.get("/tasks", params=theirs).json()["tasks"]] == ["Theirs"]
