"""
Tests for global error handling and response format consistency.

Every error is a JSON body with a ``detail`` field; transport failures also
name their category and map to a gateway-style status code.
"""

import tempfile
from contextlib import contextmanager
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from hypothesis import given, strategies as st, settings
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rest_client.config import RestClientSettings, SettingsProvider
from rest_client.database import Base, get_db
from rest_client.engine import Engine
from rest_client.main import app


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_error_handling.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


def raising_handler(request: httpx.Request) -> httpx.Response:
    """Fail according to the path of the request."""
    errors = {
        "/timeout": httpx.ReadTimeout("read timed out"),
        "/refused": httpx.ConnectError("connection refused"),
        "/broken": httpx.RemoteProtocolError("server disconnected"),
    }
    raise errors[request.url.path]


@contextmanager
def get_test_client():
    """Context manager to create a test client with fresh database."""
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db

    with tempfile.TemporaryDirectory() as folder:
        app.state.engine = Engine(
            SettingsProvider.fixed(RestClientSettings(timeout_in_milliseconds=250)),
            cookie_file=Path(folder) / "cookie.txt",
            response_folder=Path(folder) / "responses",
            transport=httpx.MockTransport(raising_handler),
        )
        try:
            with TestClient(app) as test_client:
                yield test_client
        finally:
            Base.metadata.drop_all(bind=engine)
            app.dependency_overrides.clear()


@pytest.fixture(scope="module")
def client():
    """Create test client with test database."""
    with get_test_client() as c:
        yield c


# Strategies for generating test data
resource_id_strategy = st.integers(min_value=90000, max_value=99999)


class TestErrorResponseFormat:
    """Tests for consistent error response format."""

    def test_404_error_format_history_not_found(self, client):
        response = client.get("/api/history/99999")
        assert response.status_code == 404
        data = response.json()
        assert "99999" in data["detail"]
        assert data["error_code"] == "RESOURCE_NOT_FOUND"

    def test_404_error_format_response_not_found(self, client):
        response = client.get("/api/responses/missing-id/raw")
        assert response.status_code == 404
        assert "missing-id" in response.json()["detail"]

    def test_422_validation_error_format(self, client):
        """Missing required fields are reported with the field name."""
        response = client.post("/api/execute", json={"method": "GET"})
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert "url" in data["detail"].lower()


class TestExecutionErrors:
    """Transport failures map to status codes by category."""

    @pytest.mark.parametrize("path,status_code,error_type", [
        ("/timeout", 504, "timeout"),
        ("/refused", 502, "network_error"),
        ("/broken", 502, "network_error"),
    ])
    def test_transport_failure(self, client, path: str, status_code: int, error_type: str):
        response = client.post("/api/execute", json={"url": f"https://example.com{path}"})

        assert response.status_code == status_code
        detail = response.json()["detail"]
        assert detail["error_type"] == error_type
        assert detail["error"]
        assert detail["details"]

    def test_timeout_details_name_the_limit(self, client):
        response = client.post("/api/execute", json={"url": "https://example.com/timeout"})
        assert "250 ms" in response.json()["detail"]["details"]

    def test_invalid_url(self, client):
        response = client.post("/api/execute", json={"url": "https://exa mple.com:notaport/"})

        assert response.status_code == 400
        assert response.json()["detail"]["error_type"] == "invalid_url"


class TestErrorResponseFormatConsistency:
    """
    For any missing resource, the error body is JSON with a ``detail`` field
    naming the resource id.
    """

    @given(resource_id=resource_id_strategy)
    @settings(max_examples=25, deadline=None)
    def test_404_error_response_format_consistency(self, resource_id: int):
        with get_test_client() as client:
            for endpoint in (
                f"/api/history/{resource_id}",
                f"/api/responses/{resource_id}/raw",
            ):
                response = client.get(endpoint)

                assert response.status_code == 404
                data = response.json()
                assert isinstance(data["detail"], str)
                assert str(resource_id) in data["detail"]
