"""Tests for Auth API endpoints."""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app.utils.security import create_session_token


def register(client, email="ada@stockly.io", password="secret123", name="Ada", **kwargs):
    return client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
        **kwargs
    )


def login(client, email="ada@stockly.io", password="secret123"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_register_success(client):
    """Test registering returns 201 with the public user."""
    response = register(client)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Ada"
    assert data["email"] == "ada@stockly.io"
    assert data["username"] == "ada"
    assert "id" in data
    assert "password" not in data
    assert "password_hash" not in data


def test_register_derives_unique_usernames(client):
    """Test two emails with the same local part get distinct usernames."""
    first = register(client, email="a@x.com").json()
    second = register(client, email="a@y.com").json()

    assert first["username"] == "a"
    assert second["username"] == "a1"


def test_register_duplicate_email(client):
    """Test registering an existing email returns 400."""
    register(client)

    response = register(client, name="Someone Else")

    assert response.status_code == 400
    assert response.json() == {"error": "User already exists", "details": []}


def test_register_validation_errors(client):
    """Test malformed registration bodies return 400, not 422."""
    for body in (
        {"name": "", "email": "ada@stockly.io", "password": "secret123"},
        {"name": "Ada", "email": "nope", "password": "secret123"},
        {"name": "Ada", "email": "ada@stockly.io", "password": "short"},
        {"email": "ada@stockly.io"},
    ):
        response = client.post("/api/v1/auth/register", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert data["details"]


def test_register_rejects_non_object_bodies(client):
    """Test bodies that are not a JSON object return 400 with CORS headers."""
    for kwargs in (
        {"json": []},
        {"json": "ada@stockly.io"},
        {"json": 5},
        {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
        {"content": b""},
    ):
        headers = {"Origin": "http://localhost:3000", **kwargs.pop("headers", {})}
        response = client.post("/api/v1/auth/register", headers=headers, **kwargs)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"
        assert response.json()["details"] == [
            {"field": "body", "message": "Body must be a JSON object"}
        ]
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_register_internal_error_hides_detail(client):
    """Test unexpected failures return a generic 500."""
    with patch(
        "app.services.auth_service.hash_password",
        side_effect=RuntimeError("bcrypt exploded")
    ):
        response = register(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


def test_register_echoes_allowed_origin(client):
    """Test an allow-listed Origin is echoed back."""
    response = register(client, headers={"Origin": "http://localhost:3000"})

    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_register_falls_back_to_canonical_origin(client):
    """Test an unknown Origin gets the canonical origin."""
    response = register(client, headers={"Origin": "https://evil.example.org"})

    assert response.headers["access-control-allow-origin"] == "https://stockly-inventory.vercel.app"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"


def test_register_cors_headers_on_error(client):
    """Test CORS headers are present on 400 responses too."""
    response = client.post(
        "/api/v1/auth/register",
        json={"name": ""},
        headers={"Origin": "http://localhost:3000"}
    )

    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_register_options(client):
    """Test OPTIONS on register returns 200 with CORS headers."""
    response = client.options("/api/v1/auth/register", headers={"Origin": "https://evil.example.org"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://stockly-inventory.vercel.app"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_register_preflight_bypasses_app_cors(client):
    """Test a browser preflight is answered by the registration endpoint."""
    for origin, expected in (
        ("https://evil.example.org", "https://stockly-inventory.vercel.app"),
        ("http://localhost:3000", "http://localhost:3000"),
    ):
        response = client.options(
            "/api/v1/auth/register",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            }
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == expected
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert response.headers["access-control-allow-credentials"] == "true"


def test_other_routes_keep_app_cors(client):
    """Test preflights elsewhere are still handled by the app-wide CORS policy."""
    response = client.options(
        "/api/v1/auth/login",
        headers={"Origin": "https://evil.example.org", "Access-Control-Request-Method": "POST"}
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


def test_session_without_cookie(client):
    """Test session lookup without a cookie returns 401."""
    response = client.get("/api/v1/auth/session")

    assert response.status_code == 401


def test_session_with_invalid_cookie(client):
    """Test placeholder and garbage cookies are treated as anonymous."""
    for token in ("undefined", "null", "not-a-token"):
        client.cookies.set("session_id", token)

        assert client.get("/api/v1/auth/session").status_code == 401


def test_login_sets_session_cookie(client):
    """Test login sets an HttpOnly session cookie and opens a session."""
    register(client)

    response = login(client)

    assert response.status_code == 200
    assert response.json()["email"] == "ada@stockly.io"
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("session_id=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=3600" in set_cookie

    session = client.get("/api/v1/auth/session")
    assert session.status_code == 200
    assert session.json()["username"] == "ada"
    assert "password_hash" not in session.json()


def test_login_wrong_password(client):
    """Test login with a wrong password returns 401."""
    register(client)

    response = login(client, password="wrong-pass")

    assert response.status_code == 401
    assert "session_id" not in client.cookies


def test_login_unknown_email(client):
    """Test login with an unknown email returns 401."""
    assert login(client, email="ghost@stockly.io").status_code == 401


def test_logout_clears_cookie(client):
    """Test logout deletes the cookie, ending the session for this client."""
    register(client)
    login(client)
    token = client.cookies.get("session_id")

    response = client.post("/api/v1/auth/logout")

    assert response.status_code == 204
    assert client.get("/api/v1/auth/session").status_code == 401

    # No revocation: the token itself is still valid until it expires
    client.cookies.set("session_id", token)
    assert client.get("/api/v1/auth/session").status_code == 200


def test_expired_session_cookie(client):
    """Test an expired token is treated as no session."""
    user_id = register(client).json()["id"]
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    client.cookies.set("session_id", create_session_token(user_id, now=issued))

    assert client.get("/api/v1/auth/session").status_code == 401
