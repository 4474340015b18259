"""API endpoint tests."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from src.services.notification_service import NotificationService


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 201
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "newuser@example.com"


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    # Try to register with the same email as the auth_headers user
    response = client.post(
        "/api/v1/auth/register",
        json={"email": auth_headers.email, "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 400
    assert "already registered" in response.json()["error"]


def test_register_short_password_is_validation_error(client):
    """Test validation failures use the 400 error envelope."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "short@example.com", "password": "short"},
    )
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation error"
    assert any(detail["field"] == "password" for detail in data["details"])


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    assert "access_token" in response.json()


def test_login_is_case_insensitive(client, auth_headers):
    """Test login matches emails regardless of case."""
    response = client.post(
        "/api/v1/auth/login", json={"email": "TEST@example.com", "password": "testpass123"}
    )
    assert response.status_code == 200


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Incorrect email or password"


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email
    assert response.json()["id"] == auth_headers.user_id


def test_logout(client, auth_headers):
    """Test logout acknowledges the request."""
    response = client.post("/api/v1/auth/logout", headers=auth_headers)
    assert response.status_code == 200


def test_missing_token_is_unauthorized(client):
    """Test requests without a bearer token get 401."""
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert "error" in response.json()


def test_invalid_token_is_unauthorized(client):
    """Test requests with a garbage bearer token get 401."""
    response = client.get(
        "/api/v1/notifications/settings", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid authentication credentials"


def test_refresh_issues_new_session(client):
    """Test a refresh token can be exchanged for a working access token."""
    registered = client.post(
        "/api/v1/auth/register",
        json={"email": "refresh@example.com", "password": "password123"},
    ).json()

    response = client.post(
        "/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "refresh@example.com"
    assert data["expires_in"] > 0
    me = client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200


def test_refresh_rejects_access_token(client):
    """Test access tokens cannot be used to refresh."""
    registered = client.post(
        "/api/v1/auth/register",
        json={"email": "refresh@example.com", "password": "password123"},
    ).json()

    response = client.post(
        "/api/v1/auth/refresh", json={"refresh_token": registered["access_token"]}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Token refresh failed"


def test_refresh_token_is_not_a_bearer_credential(client):
    """Test refresh tokens are rejected on regular endpoints."""
    registered = client.post(
        "/api/v1/auth/register",
        json={"email": "refresh@example.com", "password": "password123"},
    ).json()

    response = client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {registered['refresh_token']}"}
    )

    assert response.status_code == 401


def test_database_error_is_generic_500(client, auth_headers):
    """Test persistence failures return 500 without leaking internals."""
    failure = OperationalError("SELECT * FROM device_tokens", {}, Exception("connection refused"))
    with patch.object(NotificationService, "list_active_devices", side_effect=failure):
        response = client.get("/api/v1/notifications/devices", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "device_tokens" not in response.text
    assert "connection refused" not in response.text
