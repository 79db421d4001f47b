# tests/test_permissions.py

"""
Tests for permission endpoints and permission/role dependencies.
"""

from fastapi import Depends

from dependencies.auth import requires_permission
from tests.conftest import COMPANY_ID, result


def _grant(supabase, *codes):
    supabase.rpc_results["get_user_permissions"] = result([
        {"permission_code": code, "module": code.split(".")[0], "action": code.split(".")[1]}
        for code in codes
    ])


def test_my_permissions(client, supabase, login_as):
    login_as(["sales"])
    _grant(supabase, "sales.read")

    response = client.get("/permissions/me")

    assert response.json()["data"] == [{"permission_code": "sales.read", "module": "sales", "action": "read"}]
    assert supabase.rpc_calls[0][1] == {"p_user_id": "test-user-id", "p_company_id": COMPANY_ID}


def test_permission_failure_returns_empty_list(client, supabase, login_as):
    login_as(["sales"])
    supabase.rpc_results["get_user_permissions"] = RuntimeError("rpc down")

    response = client.get("/permissions/me")

    assert response.status_code == 200
    assert response.json()["data"] == []


def test_company_modules(client, supabase, login_as):
    login_as(["user"])
    supabase.rpc_results["get_company_modules"] = result([{"module_code": "sales", "is_enabled": True}])

    assert client.get("/permissions/company-modules").json()["data"] == ["sales"]


def test_navigation_for_sales(client, supabase, login_as):
    login_as(["sales"])
    _grant(supabase, "sales.read")
    supabase.rpc_results["get_company_modules"] = result([{"module_code": "sales"}])

    data = client.get("/permissions/navigation").json()["data"]

    group_ids = [g["id"] for g in data["groups"]]
    assert "sales" in group_ids
    assert "settings" not in group_ids
    assert [m["key"] for m in data["modules"]] == ["sales"]
    assert [item["id"] for item in data["dashboard"]] == ["dashboard"]


def test_navigation_for_plain_user(client, supabase, login_as):
    login_as(["user"])

    data = client.get("/permissions/navigation").json()["data"]

    assert data["groups"] == []
    assert data["modules"] == []
    assert data["dashboard"] == []


def test_route_access_for_logged_in_user(app, client, supabase, login_as):
    from dependencies.auth import get_optional_auth

    user = login_as(["sales"])
    app.dependency_overrides[get_optional_auth] = lambda: user

    allowed = client.get("/permissions/route-access", params={"path": "/admin/leads"}).json()["data"]
    denied = client.get("/permissions/route-access", params={"path": "/admin/settings/company"}).json()["data"]

    assert allowed["state"] == "authorized"
    assert denied == {"state": "unauthorized", "redirect_to": "/", "required_roles": ["admin"]}


# -----------------------------------------------------
# requires_permission dependency
# -----------------------------------------------------
def _permission_route(app):
    @app.get("/_test/stock-adjust")
    def stock_adjust(user=Depends(requires_permission("inventory.adjust"))):
        return {"user": user.id}


def test_requires_permission_allows_holder(app, client, supabase, login_as):
    _permission_route(app)
    login_as(["warehouse_manager"])
    _grant(supabase, "inventory.adjust")

    assert client.get("/_test/stock-adjust").status_code == 200


def test_requires_permission_denies_missing_code(app, client, supabase, login_as):
    _permission_route(app)
    login_as(["warehouse_manager"])
    _grant(supabase, "inventory.read")

    response = client.get("/_test/stock-adjust")

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Missing permission: inventory.adjust"


def test_requires_permission_admin_override(app, client, supabase, login_as):
    _permission_route(app)
    login_as(["admin"])

    assert client.get("/_test/stock-adjust").status_code == 200
    assert supabase.rpc_calls == []
