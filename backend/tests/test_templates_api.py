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


def test_templates_list_builtins_first(client):
    templates = client.get("/templates", params={"user_id": str(uuid4())}).json()["templates"]

    assert len(templates) == 20
    assert templates[0]["id"] == "dishes"
    assert all(template["is_built_in"] for template in templates)


def test_presets_listed(client):
    presets = client.get("/templates/presets").json()["presets"]

    assert [preset["label"] for preset in presets] == ["Dishes", "Laundry", "Trash", "Meds", "Inbox", "Water plants"]


def test_builtin_template_cannot_be_deleted(client):
    response = client.delete("/templates/dishes", params={"user_id": str(uuid4())})

    assert response.status_code == 409


def test_unknown_template_delete_returns_404(client):
    response = client.delete("/templates/nope", params={"user_id": str(uuid4())})

    assert response.status_code == 404


def test_user_template_can_be_deleted(client):
    user_id = uuid4()
    params = {"user_id": str(user_id)}
    task = client.post("/tasks", params=params, json={"title": "Water plants"}).json()["task"]
    client.post(f"/tasks/{task['id']}/steps/regenerate", params=params)
    template = client.post(f"/tasks/{task['id']}/template", params=params).json()["template"]

    response = client.delete(f"/templates/{template['id']}", params=params)

    assert response.status_code == 204
    ids = [item["id"] for item in client.get("/templates", params=params).json()["templates"]]
    assert template["id"] not in ids
