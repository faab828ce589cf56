"""Test health endpoints"""

from fellowship.config import config


class TestHealthEndpoint:
    """Test health endpoints are accessible"""

    def test_health_endpoint(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "fellowship-server"
        assert "timestamp" in data
        assert data["environment"] == config["environment"]

    def test_detailed_health_checks_database_and_auth(self, client, form_service):
        form_service.create_form(owner_id="admin-user-id")

        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        checks = response.json()["checks"]
        assert checks["database"]["status"] == "healthy"
        assert checks["database"]["registrationForms"] == 1
        assert checks["auth"]["status"] == "healthy"
        assert checks["rateLimit"]["enabled"] is False

    def test_detailed_health_reports_missing_secret(self, client):
        config["jwt_secret"] = None

        response = client.get("/api/health/detailed")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["status"] == "unhealthy"
        assert detail["checks"]["auth"]["status"] == "missing: JWT_SECRET"
        assert detail["checks"]["database"]["status"] == "healthy"
