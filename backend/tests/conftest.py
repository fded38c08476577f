import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.services.slot_locks import clear_slot_write_guard


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    clear_slot_write_guard()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_slot_write_guard()


@pytest.fixture()
def teacher(client):
    response = client.post(
        "/api/teachers",
        json={"name": "Ana Souza", "email": "ana@escola.example.com", "qualification": "MSc Mathematics"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def other_teacher(client):
    response = client.post("/api/teachers", json={"name": "Bruno Lima", "email": "bruno@escola.example.com"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def subject(client):
    response = client.post("/api/subjects", json={"name": "Mathematics", "description": "Algebra and geometry"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def make_slot(client, teacher, subject):
    def _make_slot(weekday="MONDAY", start="08:00", end="09:00", teacher_id=None, subject_id=None):
        return client.post(
            "/api/schedules",
            json={
                "teacherId": teacher_id or teacher["id"],
                "subjectId": subject_id or subject["id"],
                "weekday": weekday,
                "startTime": start,
                "endTime": end,
            },
        )

    return _make_slot
