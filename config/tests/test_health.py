import pytest
from django.db import DatabaseError
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_health_reports_database_ok():
    resp = APIClient().get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok"}


@pytest.mark.django_db
def test_health_degrades_when_database_is_down(monkeypatch):
    class BrokenCursor:
        def __enter__(self):
            raise DatabaseError("down")

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr("config.health.connection.cursor", lambda: BrokenCursor())
    resp = APIClient().get("/health/")
    assert resp.status_code == 503
    assert resp.json()["database"] == "unavailable"
