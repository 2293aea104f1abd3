from invoice_server.core.config import settings
from invoice_server.core.security import create_access_token


def test_register_returns_user_and_token(client):
    response = client.post(
        "/api/users/register",
        json={"username": "carol", "email": "carol@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["username"] == "carol"
    assert body["user"]["email"] == "carol@example.com"
    assert "passwordHash" not in body["user"]
    assert body["token"]


def test_register_duplicate_email_conflicts(client, auth_headers):
    response = client.post(
        "/api/users/register",
        json={"username": "alice2", "email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "User already exists"


def test_register_validation_errors_are_listed(client):
    response = client.post(
        "/api/users/register",
        json={"username": "a!", "email": "not-an-email", "password": "123"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    fields = {detail.split(":")[0] for detail in body["details"]}
    assert {"username", "email", "password"} <= fields


def test_login_success(client, auth_headers):
    response = client.post(
        "/api/users/login", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["username"] == "alice"
    assert body["token"]


def test_login_failures_look_the_same(client, auth_headers):
    wrong_password = client.post(
        "/api/users/login", json={"email": "alice@example.com", "password": "nope-nope"}
    )
    unknown_user = client.post(
        "/api/users/login", json={"email": "nobody@example.com", "password": "secret123"}
    )
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["message"] == "Invalid email or password"


def test_profile(client, auth_headers):
    response = client.get("/api/users/profile", headers=auth_headers)
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["username"] == "alice"
    assert "createdAt" in user


def test_missing_token_is_401(client):
    response = client.get("/api/users/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "Access denied. No token provided."


def test_invalid_token_is_403(client):
    response = client.get("/api/users/profile", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 403
    assert response.json()["error"] == "Invalid or expired token."


def test_token_for_deleted_user_is_404(client):
    token = create_access_token("4242")
    response = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_security_bypass_serves_user_one(client, monkeypatch):
    monkeypatch.setattr(settings, "API_SECURE", False)
    client.post(
        "/api/users/register",
        json={"username": "devuser", "email": "dev@example.com", "password": "secret123"},
    )

    response = client.get("/api/users/profile")
    assert response.status_code == 200
    assert response.json()["user"]["id"] == 1


def test_password_longer_than_bcrypt_reads_is_400(client):
    response = client.post(
        "/api/users/register",
        json={"username": "longpw", "email": "longpw@example.com", "password": "x" * 80},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert any(detail.startswith("password:") and "72 bytes" in detail for detail in body["details"])


def test_multibyte_password_is_measured_in_bytes(client):
    # 25 characters, 75 bytes
    response = client.post(
        "/api/users/register",
        json={"username": "euro", "email": "euro@example.com", "password": "€" * 25},
    )
    assert response.status_code == 400


def test_login_with_overlong_password_is_401(client, auth_headers):
    response = client.post(
        "/api/users/login", json={"email": "alice@example.com", "password": "x" * 80}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_token_subject_out_of_range_is_403(client):
    token = create_access_token(str(2**63))
    response = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403
