from app.core.config import Settings
from app.db.base import Base
from app.db.bootstrap import is_managed_object


def test_health_endpoints(client):
    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"
    assert "X-Request-ID" in live.headers
    assert live.headers["X-Content-Type-Options"] == "nosniff"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert "missing_tables" in payload["database"]


def test_oversized_request_is_rejected(client):
    response = client.post(
        "/api/subjects",
        content=b"{}",
        headers={"content-type": "application/json", "content-length": "999999999"},
    )
    assert response.status_code == 413


def test_settings_parse_cors_origins_from_strings():
    assert Settings(cors_origins="http://a.test, http://b.test").cors_origins == ["http://a.test", "http://b.test"]
    assert Settings(cors_origins='["http://c.test"]').cors_origins == ["http://c.test"]


def test_settings_normalize_log_level():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


def test_migrations_only_manage_schedule_tables():
    slots = Base.metadata.tables["schedule_slots"]
    assert is_managed_object(slots, "schedule_slots", "table", False, None)
    assert not is_managed_object(None, "legacy_timetable", "table", True, None)
    assert is_managed_object(slots.c.start_time, "start_time", "column", False, None)
    index = next(iter(slots.indexes))
    assert is_managed_object(index, index.name, "index", False, None)
