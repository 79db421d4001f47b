# tests/test_auth.py

"""
Tests for authentication endpoints and the current-user dependency.
"""

from unittest.mock import Mock, patch

from core.cache import cache_get, cache_set, make_key
from core.config import settings
from tests.conftest import COMPANY_ID, result


def _session(token="test-token"):
    return Mock(
        session=Mock(access_token=token, refresh_token="refresh", expires_in=3600),
        user=Mock(id="user-1"),
    )


def _auth_user(user_id="user-1"):
    return Mock(user=Mock(id=user_id, email="ana@example.com", user_metadata={"first_name": "Ana"}))


# -----------------------------------------------------
# Login
# -----------------------------------------------------
def test_login_success(client, supabase, company):
    supabase.auth.sign_in_with_password.return_value = _session()
    supabase.queue("company_memberships", [{"company_id": COMPANY_ID, "is_active": True}])
    supabase.rpc_results["get_user_roles"] = result(["sales"])

    response = client.post("/auth/login", json={"email": " Ana@Example.com", "password": "password123"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["access_token"] == "test-token"
    assert data["company_id"] == COMPANY_ID
    assert data["roles"] == ["sales"]
    credentials = supabase.auth.sign_in_with_password.call_args[0][0]
    assert credentials["email"] == "ana@example.com"


def test_login_invalid_credentials(client, supabase, company):
    supabase.auth.sign_in_with_password.side_effect = Exception("Invalid credentials")

    response = client.post("/auth/login", json={"email": "test@example.com", "password": "wrongpassword"})

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"message": "Invalid email or password", "code": 401},
    }


def test_login_rejects_non_member(client, supabase, company):
    supabase.auth.sign_in_with_password.return_value = _session()

    response = client.post("/auth/login", json={"email": "test@example.com", "password": "password123"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "User does not belong to this company"


def test_login_rate_limited(client, supabase, company):
    supabase.auth.sign_in_with_password.side_effect = Exception("nope")

    with patch.object(settings, "AUTH_RATE_LIMIT_MAX", 2):
        codes = [
            client.post("/auth/login", json={"email": "a@example.com", "password": "x"}).status_code
            for _ in range(3)
        ]

    assert codes == [401, 401, 429]


def test_login_without_tenant(client, supabase):
    response = client.post(
        "/auth/login",
        json={"email": "a@example.com", "password": "x"},
        headers={"host": "evil.example.org"},
    )
    assert response.status_code == 400


# -----------------------------------------------------
# get_current_user (real dependency)
# -----------------------------------------------------
def test_me_requires_token(client, supabase, company):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Authentication token is required"


def test_me_with_valid_token(client, supabase, company):
    supabase.auth.get_user.return_value = _auth_user()
    supabase.queue("company_memberships", [{"company_id": COMPANY_ID, "is_active": True}])
    supabase.rpc_results["get_user_roles"] = result(["accounts", "sales"])

    response = client.get("/auth/me", headers={"Authorization": "Bearer token"})

    data = response.json()["data"]
    assert data["id"] == "user-1"
    assert data["role"] == "accounts"
    assert data["roles"] == ["accounts", "sales"]
    assert data["first_name"] == "Ana"
    supabase.auth.get_user.assert_called_once_with("token")


def test_me_with_invalid_token(client, supabase, company):
    supabase.auth.get_user.side_effect = Exception("jwt expired")

    response = client.get("/auth/me", headers={"Authorization": "Bearer expired"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_for_user_of_other_company(client, supabase, company):
    supabase.auth.get_user.return_value = _auth_user()

    response = client.get("/auth/me", headers={"Authorization": "Bearer token"})

    assert response.json()["error"]["message"] == "User does not belong to this company"


# -----------------------------------------------------
# Logout + profile
# -----------------------------------------------------
def test_logout_drops_cached_access(client, supabase, login_as):
    user = login_as(["sales"])
    key = make_key("roles", user.id, COMPANY_ID)
    cache_set(key, ["sales"])

    response = client.post("/auth/logout")

    assert response.json()["message"] == "Logged out successfully"
    assert cache_get(key) is None


def test_profile_update(client, supabase, login_as):
    user = login_as(["user"])
    supabase.queue("profiles", [{"id": user.id, "first_name": "Ana"}])

    response = client.put("/auth/profile", json={"first_name": " Ana ", "role": "admin"})

    assert response.status_code == 200
    supabase.queries["profiles"][0].update.assert_called_once_with({"first_name": "Ana"})
