import uuid
from datetime import timedelta

from finance_tracker.security import create_access_token, verify_access_token

from .conftest import PASSWORD


def test_register_returns_usable_token(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Carol", "email": "Carol@Example.com", "password": "hunter22"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "carol@example.com"
    assert body["user"]["name"] == "Carol"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["user"] == body["user"]


def test_register_rejects_duplicate_email(client, alice):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Other Alice", "email": "alice@example.com", "password": "hunter22"},
    )

    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [{"field": "email", "message": "Email already registered."}]
    }


def test_register_validates_input(client):
    resp = client.post(
        "/api/auth/register", json={"name": "", "email": "nope", "password": "123"}
    )

    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"name", "email", "password"}


def test_login(client, alice):
    user_id, _ = alice
    resp = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
    )

    assert resp.status_code == 200
    assert verify_access_token(resp.json()["token"]) == user_id


def test_login_with_wrong_password(client, alice):
    resp = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-one"}
    )

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password."}


def test_expired_token_is_rejected(client, alice):
    user_id, _ = alice
    token = create_access_token(user_id, expires_in=timedelta(seconds=-1))

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired"}


def test_token_for_unknown_user_is_rejected(client):
    token = create_access_token(uuid.uuid4())

    resp = client.get("/api/transactions", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_health(client):
    body = client.get("/api/health").json()

    assert body["status"] == "OK"
    assert "timestamp" in body
