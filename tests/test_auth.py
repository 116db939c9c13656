from app.core.auth.security import (
    create_access_token, decode_access_token, get_password_hash, verify_password
)
from tests.factories import DEFAULT_PASSWORD, auth_headers, make_user


def test_password_hash_round_trip():
    hashed = get_password_hash("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("hunter22", "not-a-hash")


def test_token_decode():
    token = create_access_token({"id": 5, "role": "admin"})
    payload = decode_access_token(token)
    assert payload["id"] == 5
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token({"id": 5}, expires_minutes=-1)
    assert decode_access_token(token) is None


def test_login_issues_token(client, db, warehouse_b):
    user = make_user(db, email="ops@example.com", warehouse=warehouse_b)

    response = client.post("/api/auth/login", json={"email": "OPS@example.com", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["warehouse_id"] == warehouse_b.id

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["id"] == user.id


def test_login_with_wrong_password(client, db):
    make_user(db, email="ops@example.com")
    response = client.post("/api/auth/login", json={"email": "ops@example.com", "password": "nope"})
    assert response.status_code == 401


def test_inactive_user_token_is_rejected(client, db):
    user = make_user(db, is_active=False)
    response = client.get("/api/auth/me", headers=auth_headers(user))
    assert response.status_code == 401


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
