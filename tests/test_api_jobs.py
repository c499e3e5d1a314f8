"""Tests for the job API against an in-memory database."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import routes_jobs
from app.db.session import Base, get_db
from app.main import app


@pytest.fixture
def task(monkeypatch):
    task = MagicMock()
    monkeypatch.setattr(routes_jobs, "run_feature_job", task)
    return task


@pytest.fixture
def client(task):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: the startup hook (database wait, migrations) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/v1/health")

    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_create_and_fetch_job(client, task):
    r = client.post("/v1/jobs", json={
        "query": "Can you store the recently played songs in a table",
        "project_dir": "/data/projects/spotify-clone",
    })

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "QUEUED"
    assert body["stage"] == "ANALYZE_PROJECT"
    assert body["artifacts"] == {}
    task.delay.assert_called_once_with(body["id"])

    fetched = client.get(f"/v1/jobs/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["query"] == "Can you store the recently played songs in a table"


def test_empty_query_is_rejected(client, task):
    r = client.post("/v1/jobs", json={"query": "", "project_dir": "/tmp/p"})

    assert r.status_code == 422
    task.delay.assert_not_called()


def test_unknown_job_is_404(client):
    assert client.get("/v1/jobs/does-not-exist").status_code == 404
