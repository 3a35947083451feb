from __future__ import annotations

from unittest.mock import patch

from sqlalchemy.exc import OperationalError


def test_health_endpoint(client):
    """GET /api/health should return 200 with status=healthy."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "folio-backend"
    assert data["version"] == "0.1.0"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["content"] == "ok"


def test_readiness_endpoint(client):
    """GET /api/health/ready should return 200 with status=ready."""
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "service": "folio-backend"}


# ── Edge Cases ────────────────────────────────────────────────────────


def _failing_exec(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))


class TestHealthEdgeCases:
    def test_health_reports_database_error(self, client, session):
        with patch.object(session, "exec", side_effect=_failing_exec):
            resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "unhealthy"
        assert data["checks"]["database"].startswith("error:")

    def test_readiness_returns_503_when_database_down(self, client, session):
        with patch.object(session, "exec", side_effect=_failing_exec):
            resp = client.get("/api/health/ready")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "not ready"
        assert "disk I/O error" in data["error"]
