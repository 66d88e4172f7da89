"""
Name: Health, Metrics and Error Body Tests

Responsibilities:
  - /healthz in test and production-like modes
  - /metrics exposition and optional admin gate
  - Router 404/405 and request id propagation
"""

from unittest.mock import MagicMock

import pytest

from spaced_api import container
from spaced_api.crosscutting.config import get_settings

pytestmark = pytest.mark.unit


class TestHealth:
    def test_healthz_connected_in_test_env(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "db": "connected"}

    def test_healthz_without_pool_outside_tests(self, client, monkeypatch):
        monkeypatch.setenv("APP_ENV", "development")
        get_settings.cache_clear()

        assert client.get("/healthz").json() == {"ok": True, "db": "not_configured"}

    def test_healthz_db_down(self, client):
        repo = MagicMock()
        repo.ping.side_effect = RuntimeError("down")
        container.override_volunteer_repository(repo)

        assert client.get("/healthz").json() == {"ok": False, "db": "disconnected"}


class TestMetrics:
    def test_metrics_exposes_prometheus_text(self, client):
        client.get("/healthz")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "spaced_requests_total" in response.text

    def test_metrics_requires_admin_when_configured(self, client, monkeypatch, admin_headers):
        monkeypatch.setenv("METRICS_REQUIRE_AUTH", "true")
        get_settings.cache_clear()

        assert client.get("/metrics").status_code == 401
        assert client.get("/metrics", headers=admin_headers).status_code == 200


class TestErrorBodies:
    def test_unknown_route_is_json_404(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}

    def test_wrong_method_is_json_405(self, client):
        response = client.get("/api/auth/logout")

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method Not Allowed"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/healthz", headers={"X-Request-Id": "req-12345678"})

        assert response.headers["x-request-id"] == "req-12345678"

    def test_request_id_is_generated(self, client):
        assert client.get("/healthz").headers["x-request-id"]

    def test_database_error_is_500_with_message(self, client, user_headers):
        from spaced_api.crosscutting.exceptions import DatabaseError

        repo = MagicMock()
        repo.list_activities.side_effect = DatabaseError("데이터베이스 오류")
        container.override_volunteer_repository(repo)

        response = client.get("/api/volunteer/activities", headers=user_headers)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "데이터베이스 오류"}
