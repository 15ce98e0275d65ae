from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from photoshare.models.database import Admin
from photoshare.services.auth_service import AuthService
from photoshare.utils.exceptions import ForbiddenError, UnauthorizedError


def test_login_returns_token_with_admin_claims(client, admin):
    response = client.post(
        "/api/admin/login",
        json={"username": "admin", "password": "admin123"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["admin"] == {"id": admin["id"], "username": "admin", "email": "admin@example.com"}

    claims = jwt.decode(body["token"], "test-secret", algorithms=["HS256"])
    assert claims["adminId"] == admin["id"]
    assert claims["username"] == "admin"
    assert claims["exp"] - claims["iat"] == 24 * 3600


@pytest.mark.parametrize("username,password", [
    ("admin", "wrong-password"),
    ("nobody", "admin123"),
])
def test_login_rejects_bad_credentials_without_revealing_which(client, admin, username, password):
    response = client.post("/api/admin/login", json={"username": username, "password": password})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_requires_both_fields(client):
    response = client.post("/api/admin/login", json={"username": "admin"})

    assert response.status_code == 400
    assert "password" in response.json()["error"]


def test_token_expires_after_24_hours():
    auth_service = AuthService("secret")
    issued = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    token = auth_service.create_access_token(Admin(id=7, username="planner"), now=issued)

    claims = auth_service.authenticate(token, now=issued + timedelta(hours=23, minutes=59))
    assert claims.adminId == 7
    assert claims.username == "planner"

    with pytest.raises(ForbiddenError):
        auth_service.authenticate(token, now=issued + timedelta(hours=24, minutes=1))


def test_token_signed_with_other_secret_is_rejected():
    token = AuthService("other").create_access_token(Admin(id=1, username="admin"))

    with pytest.raises(ForbiddenError):
        AuthService("secret").authenticate(token)


def test_missing_token_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        AuthService("secret").authenticate(None)


def test_profile_requires_token(client):
    response = client.get("/api/admin/profile")

    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def test_profile_rejects_invalid_token(client):
    response = client.get("/api/admin/profile", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 403
    assert response.json() == {"error": "Invalid or expired token"}


def test_profile_returns_admin_without_password_hash(client, admin, auth_headers):
    response = client.get("/api/admin/profile", headers=auth_headers)

    assert response.status_code == 200
    profile = response.json()["admin"]
    assert profile["id"] == admin["id"]
    assert profile["username"] == "admin"
    assert "password_hash" not in profile
    assert "created_at" in profile


def test_profile_of_deleted_admin_is_not_found(app, client, admin, auth_headers):
    with app.state.session_factory() as session:
        session.delete(session.get(Admin, admin["id"]))
        session.commit()

    response = client.get("/api/admin/profile", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Admin not found"}


def test_stored_password_is_bcrypt_hash(db, admin):
    stored = db.get(Admin, admin["id"])

    assert stored.password_hash != "admin123"
    assert stored.password_hash.startswith("$2")
