# tests/test_auth.py


def test_signup_and_login(client):
    payload = {"name": "Alice", "email": "Alice@Example.com", "password": "secret123"}
    resp = client.post("/api/auth/signup", json=payload)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["email"] == "alice@example.com"
    assert data["is_admin"] is False
    assert "password" not in data and "password_hash" not in data

    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["token"]
    assert body["user"]["name"] == "Alice"
    assert resp.cookies.get("token") == body["token"]


def test_signup_duplicate_email(client, temp_user):
    resp = client.post("/api/auth/signup", json={
        "name": "Again", "email": temp_user["row"]["email"].upper(), "password": "secret123",
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"


def test_signup_validates_payload(client):
    resp = client.post("/api/auth/signup", json={"name": "Bob", "email": "not-an-email", "password": "x"})
    assert resp.status_code == 422


def test_login_wrong_password(client, temp_user):
    resp = client.post("/api/auth/login", json={"email": temp_user["row"]["email"], "password": "wrong-pass"})
    assert resp.status_code == 400
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert resp.status_code == 400


def test_token_endpoint(client, temp_user):
    resp = client.post("/api/auth/token", data={"username": temp_user["row"]["email"], "password": "secret123"})
    assert resp.status_code == 200, resp.text
    token_data = resp.json()
    assert token_data["token_type"] == "bearer"
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token_data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["id"] == temp_user["row"]["id"]

    resp = client.post("/api/auth/token", data={"username": temp_user["row"]["email"], "password": "nope"})
    assert resp.status_code == 401


def test_me_with_login_cookie_and_logout(client, temp_user):
    resp = client.post("/api/auth/login", json={"email": temp_user["row"]["email"], "password": "secret123"})
    assert resp.status_code == 200

    # the client keeps the cookie; no Authorization header needed
    me = client.get("/api/auth/me")
    assert me.status_code == 200, me.text
    assert me.json()["user"]["email"] == temp_user["row"]["email"]

    out = client.get("/api/auth/logout")
    assert out.status_code == 200
    assert out.json() == {"message": "Logged out successfully"}
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_token_of_deleted_user(client, temp_user):
    from storefront.database import db

    db.delete_record("users", "id", temp_user["row"]["id"])
    assert client.get("/api/auth/me", headers=temp_user["headers"]).status_code == 401


def test_me_rejects_expired_token(client, temp_user, auth_header):
    from storefront.core.security import create_access_token

    stale = create_access_token(subject=temp_user["row"]["id"], expires_minutes=-1)
    assert client.get("/api/auth/me", headers=auth_header(stale)).status_code == 401
