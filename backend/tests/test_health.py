"""
Tests for health checks, request correlation and CORS origins.
"""

import logging

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from shared.config.settings import Settings
from shared.infrastructure.correlation import CorrelationIdFilter
from rest_api.core.cors import LOCAL_ORIGINS, cors_origins
from rest_api.core.lifespan import check_settings


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "rest-api"

    def test_detailed_health_with_database(self, client, db_session, monkeypatch):
        engine = db_session.get_bind()
        monkeypatch.setattr("rest_api.main.SessionLocal", lambda: Session(bind=engine))

        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        assert response.json()["dependencies"]["database"]["status"] == "healthy"

    def test_detailed_health_database_down(self, client, monkeypatch):
        """Should answer 503 when the database cannot be reached."""

        class UnreachableSession:
            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                return False

            def execute(self, statement):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr("rest_api.main.SessionLocal", UnreachableSession)

        response = client.get("/api/health/detailed")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"


class TestCorrelation:
    def test_request_id_is_echoed(self, client):
        """Should return the caller's X-Request-ID."""
        response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/health")

        assert len(response.headers["X-Request-ID"]) == 32

    def test_filter_outside_request(self):
        """Should stamp placeholders when no request is being served."""
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", (), None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.request_id == "-"
        assert record.staff_id == "-"


class TestCorsOrigins:
    def test_configured_origins_are_split(self):
        config = Settings(allowed_origins="https://a.example, https://b.example")

        assert cors_origins(config) == ["https://a.example", "https://b.example"]

    def test_local_fallback_outside_production(self):
        config = Settings(allowed_origins="", environment="development")

        assert cors_origins(config) == list(LOCAL_ORIGINS)

    def test_production_without_origins_allows_none(self):
        config = Settings(allowed_origins="", environment="production", debug=False)

        assert cors_origins(config) == []


class TestStartupChecks:
    def test_unsafe_production_settings_abort(self):
        """Should refuse to start in production with debug on and no origins."""
        config = Settings(environment="production", debug=True, allowed_origins="")

        with pytest.raises(RuntimeError, match="DEBUG must be False"):
            check_settings(config)

    def test_development_only_logs(self):
        config = Settings(environment="development", debug=True, service_charge_rate="1.5")

        check_settings(config)

    def test_safe_production_settings(self):
        config = Settings(environment="production", debug=False, allowed_origins="https://ops.example")

        check_settings(config)
