"""Tests for the health check endpoint."""

from fastapi.testclient import TestClient

from archivist.core.config import Settings
from archivist.main import app, create_app

client = TestClient(app)


def test_health_endpoint():
    """Test that the health endpoint returns correct response."""
    response = client.get("/health")

    assert response.status_code == 200

    data = response.json()

    assert "status" in data
    assert "service" in data
    assert "version" in data

    assert data["status"] == "ok"


def test_health_endpoint_values():
    """Test that the health endpoint reports the configured service."""
    test_client = TestClient(create_app(Settings(SERVICE_NAME="archivist-test", SERVICE_VERSION="9.9.9")))

    response = test_client.get("/health")

    assert response.status_code == 200

    data = response.json()

    assert data["service"] == "archivist-test"
    assert data["version"] == "9.9.9"


def test_health_does_not_need_uploader():
    """Health stays green even before the upload pipeline exists."""
    response = client.get("/health")

    assert response.status_code == 200
    assert "X-Request-Id" in response.headers
