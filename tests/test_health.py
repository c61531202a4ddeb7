"""Tests for health check endpoints."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from storefront.api.dependencies import get_session_factory
from storefront.main import app


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    """Create test client."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


class UnreachableSession:
    """Session stand-in whose queries fail like a dropped connection."""

    async def __aenter__(self) -> "UnreachableSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def execute(self, statement) -> None:
        raise OperationalError(str(statement), {}, ConnectionRefusedError("connection refused"))


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "storefront-api"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"


def test_readiness_check_database_down(client: TestClient) -> None:
    """Readiness reports 503 when the database cannot be reached."""
    app.dependency_overrides[get_session_factory] = lambda: UnreachableSession

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
