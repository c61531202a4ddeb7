"""Shared fixtures for API tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from storefront.api.dependencies import get_session_factory
from storefront.main import app

USER_ID = "user-1"


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    """Create test client over the seeded database, without a user."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers() -> dict[str, str]:
    """Get gateway identity headers."""
    return {"X-User-ID": USER_ID, "X-User-Email": "shopper@example.com"}


@pytest.fixture
def user_client(client: TestClient, user_headers: dict[str, str]) -> TestClient:
    """Create test client acting as an authenticated user."""
    client.headers.update(user_headers)
    return client
