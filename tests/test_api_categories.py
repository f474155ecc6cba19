import pytest

from acrocat.auth.tokens import issue_token
from acrocat.auth.users import create_user
from acrocat.infra.models import Acronym, Category, Token
from acrocat.services.tag_service import reconcile_tags


@pytest.fixture()
def alice(db):
    return create_user(db, name="Alice", username="alice", password="password123")


@pytest.fixture()
def tagged(db, alice):
    acronym = Acronym(short="OMG", long="Oh My God", user=alice)
    db.add(acronym)
    db.flush()
    reconcile_tags(db, acronym, ["Funny"])
    db.commit()
    return acronym


def test_list_and_get_categories(client, tagged, db):
    funny = db.query(Category).filter_by(name="Funny").one()
    r = client.get("/api/categories")
    assert r.status_code == 200
    assert r.json() == [{"id": funny.id, "name": "Funny"}]

    assert client.get(f"/api/categories/{funny.id}").json() == {"id": funny.id, "name": "Funny"}

    r = client.get("/api/categories/999")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not found"}


def test_category_acronyms(client, tagged, alice, db):
    funny = db.query(Category).filter_by(name="Funny").one()
    r = client.get(f"/api/categories/{funny.id}/acronyms")
    assert r.status_code == 200
    assert r.json() == [{"id": tagged.id, "short": "OMG", "long": "Oh My God", "user_id": alice.id}]


def test_create_category_requires_bearer_token(client, db):
    r = client.post("/api/categories", json={"name": "Teenager"})
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.post("/api/categories", json={"name": "Teenager"}, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert db.query(Category).count() == 0


def test_create_category_with_token(client, alice, db):
    token = issue_token(db, alice).token
    headers = {"Authorization": f"Bearer {token}"}

    r = client.post("/api/categories", json={"name": "Teenager"}, headers=headers)
    assert r.status_code == 200
    created = r.json()
    assert created["name"] == "Teenager"

    again = client.post("/api/categories", json={"name": "Teenager"}, headers=headers)
    assert again.json()["id"] == created["id"]
    assert db.query(Category).count() == 1

    assert client.post("/api/categories", json={"name": "  "}, headers=headers).status_code == 422


def test_api_login_issues_token(client, alice, db):
    r = client.post("/api/users/login", auth=("alice", "password123"))
    assert r.status_code == 200
    body = r.json()
    assert body["user_id"] == alice.id
    assert db.query(Token).filter_by(token=body["token"]).count() == 1

    r = client.post("/api/categories", json={"name": "Teenager"}, headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200


def test_api_login_rejects_bad_credentials(client, alice):
    r = client.post("/api/users/login", auth=("alice", "wrong-password"))
    assert r.status_code == 401


def test_api_does_not_create_browser_sessions(client):
    r = client.get("/api/categories")
    assert "acrocat_session" not in r.cookies
