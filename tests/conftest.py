import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from main import create_app


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        FORGE_CLIENT_ID="client-id",
        FORGE_CLIENT_SECRET="client-secret",
        FORGE_BASE_URL="https://forge.test",
        FORGE_BUCKET_KEY="test-bucket",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def register(client):
    def _register(username="alice", email=None, password="secret12"):
        resp = client.post(
            "/auth/register",
            json={"username": username, "email": email or f"{username}@x.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        data["headers"] = {"Authorization": f"Bearer {data['token']}"}
        return data

    return _register


@pytest.fixture
def alice(register):
    return register("alice", "a@x.com")


@pytest.fixture
def bob(register):
    return register("bob", "b@x.com")
