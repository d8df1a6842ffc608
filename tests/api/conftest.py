"""
Shared fixtures for API tests.
"""
import pytest
from fastapi.testclient import TestClient

from taskhub_api.main import create_app

PASSWORD = "secret123"


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    """TestClient with lifespan run; HTTP and WebSocket share its event loop."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def services(app):
    return app.state.services


@pytest.fixture()
def alice(signup):
    return signup("alice")


@pytest.fixture()
def bob(signup):
    return signup("bob")


@pytest.fixture()
def signup(client):
    """Register a user and return headers carrying their session cookie.

    The client's cookie jar is cleared so several users can share one
    client (and therefore one event loop) without their cookies clashing.
    """
    def _signup(username, password=PASSWORD):
        resp = client.post("/auth/register", json={"username": username, "password": password})
        assert resp.status_code == 201, resp.text
        token = resp.cookies.get("token")
        assert token
        client.cookies.clear()
        return {"Cookie": f"token={token}"}
    return _signup
