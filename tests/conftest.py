import os
import re
import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

# Must be set before acrocat is imported: the engine is built at import time.
os.environ["ACROCAT_ENV"] = "testing"
os.environ["ACROCAT_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ACROCAT_SECRET_KEY", "test-secret-key")
os.environ["ACROCAT_USERS_PATH"] = str(_Path(__file__).resolve().parent / "no-such-users.yml")

import pytest
from fastapi.testclient import TestClient

from acrocat.auth.session import SessionHandle, SessionStore
from acrocat.infra.db import Base, SessionLocal, engine, init_db

PASSWORD = "password123"


@pytest.fixture()
def db():
    """A fresh schema per test."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore(max_age=3600)


@pytest.fixture()
def browser(store) -> SessionHandle:
    return SessionHandle(store, store.create())


@pytest.fixture()
def client(db):
    from acrocat.app import app

    app.state.sessions = SessionStore(max_age=3600)
    with TestClient(app) as c:
        yield c


def _register(client: TestClient, username: str = "alice", name: str = "Alice") -> None:
    r = client.post(
        "/register",
        data={"name": name, "username": username, "password": PASSWORD, "confirmPassword": PASSWORD},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "/"


def _form_token(client: TestClient, path: str) -> str:
    r = client.get(path)
    assert r.status_code == 200
    m = re.search(r'name="csrfToken" value="([^"]+)"', r.text)
    assert m, "form has no csrf token"
    return m.group(1)


@pytest.fixture()
def logged_in(client):
    _register(client)
    return client


@pytest.fixture()
def register_user():
    return _register


@pytest.fixture()
def csrf_from():
    return _form_token
