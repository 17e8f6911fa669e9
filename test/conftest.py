"""
Shared fixtures: in-memory SQLite database, local attachment store in a temp
directory, and a TestClient running the full app.
"""
import os
import tempfile
from pathlib import Path

# Must be set before config is imported anywhere
_TMP = Path(tempfile.mkdtemp(prefix="registry-test-"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOADS_DIR"] = str(_TMP / "uploads")
os.environ["LOG_FILE"] = str(_TMP / "logs" / "test.log")
os.environ["ENVIRONMENT"] = "test"
os.environ["DEFAULT_ADMIN_USERNAME"] = "admin"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "123456"
os.environ["MAX_UPLOAD_SIZE_MB"] = "10"

import pytest
from fastapi.testclient import TestClient

import config
from database.connection import Database
from database.models import UserRole
from storage.local_store import LocalBlobStore
from services.user_service import UserService

ADMIN_PASSWORD = "123456"
DEFAULT_PASSWORD = "secret123"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 256


@pytest.fixture
def database(tmp_path):
    db = Database("sqlite://")
    db.create_tables()
    config.db = db
    config.blob_store = LocalBlobStore(tmp_path / "attachments")
    yield db
    db.drop_tables()
    db.engine.dispose()
    config.db = None
    config.blob_store = None


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(database):
    from app import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(database):
    """Create a user directly through the service layer."""
    def _make(username: str, role: UserRole = UserRole.OFFICER, password: str = DEFAULT_PASSWORD, **fields):
        with database.get_session() as session:
            user = UserService.create_user(session, username=username, password=password, role=role, **fields)
            return user.id
    return _make


@pytest.fixture
def login(client):
    """Log in and return bearer headers. Cookies are dropped so each call names its credentials."""
    def _login(username: str, password: str = DEFAULT_PASSWORD):
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['sessionToken']}"}
    return _login


@pytest.fixture
def admin_headers(login):
    return login(config.DEFAULT_ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def role_headers(make_user, login):
    """Bearer headers for a fresh user of the given role."""
    def _headers(role: UserRole, username: str = None):
        username = username or f"{role.value}_user"
        make_user(username, role=role)
        return login(username)
    return _headers


def detainee_form(**overrides):
    form = {
        "fullName": "Juan Carlos Rodriguez",
        "cedula": "12345678",
        "birthDate": "1985-03-15",
        "state": "Zulia",
        "municipality": "Maracaibo",
        "parish": "Chiquinquira",
        "address": "Av. 5 de Julio, casa 12",
        "registro": "Detenido en operativo",
        "phone": "0414-5551234",
    }
    form.update(overrides)
    return form


@pytest.fixture
def register(client):
    """POST a detainee registration; returns the response."""
    def _register(headers, files=None, **overrides):
        return client.post("/api/detainees", data=detainee_form(**overrides), files=files, headers=headers)
    return _register
