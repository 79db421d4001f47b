# tests/test_admin.py

from tests.conftest import COMPANY_ID, result


def test_accounts_can_list_users(client, supabase, login_as):
    login_as(["accounts"])
    supabase.queue("profiles", [{"id": "u-2", "email": "b@example.com"}], count=21)
    supabase.rpc_results["get_user_roles"] = result(["sales"])

    response = client.get("/admin/users", params={"page": 2, "limit": 10})

    data = response.json()["data"]
    assert data["users"][0]["roles"] == ["sales"]
    assert data["pagination"] == {"page": 2, "limit": 10, "total": 21, "pages": 3}
    supabase.queries["profiles"][0].range.assert_called_once_with(10, 19)


def test_sales_cannot_list_users(client, supabase, login_as):
    login_as(["sales"])
    assert client.get("/admin/users").status_code == 403


def test_accounts_cannot_change_roles(client, supabase, login_as):
    login_as(["accounts"])

    response = client.put("/admin/users/u-2/roles", json={"roles": ["sales"]})

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Only administrators can change user roles"


def test_unknown_role_rejected(client, supabase, login_as):
    login_as(["admin"])

    response = client.put("/admin/users/u-2/roles", json={"roles": ["sales", "wizard"]})

    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith("Invalid roles: wizard.")


def test_admin_cannot_drop_own_admin_role(client, supabase, login_as):
    user = login_as(["admin"])

    response = client.put(f"/admin/users/{user.id}/roles", json={"roles": ["sales"]})

    assert response.json()["error"]["message"] == "You cannot remove your own admin role"


def test_assign_roles(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("company_memberships", [{"company_id": COMPANY_ID, "is_active": True}])
    supabase.queue("roles", [{"id": "r-1", "name": "accounts"}, {"id": "r-2", "name": "sales"}])

    response = client.put("/admin/users/u-2/roles", json={"roles": ["accounts", "sales"]})

    assert response.status_code == 200
    assert response.json()["data"] == {"userId": "u-2", "companyId": COMPANY_ID, "roles": ["accounts", "sales"]}

    membership = supabase.queries["company_memberships"][1]
    membership.update.assert_called_once_with({"role": "accounts"})
    membership.eq.assert_any_call("company_id", COMPANY_ID)

    profile = supabase.queries["profiles"][0]
    profile.eq.assert_any_call("company_id", COMPANY_ID)


def test_assign_roles_to_user_outside_company(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("company_memberships", [])

    response = client.put("/admin/users/outsider/roles", json={"roles": ["sales"]})

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found in this company"

    lookup = supabase.queries["company_memberships"][0]
    lookup.eq.assert_any_call("user_id", "outsider")
    lookup.eq.assert_any_call("company_id", COMPANY_ID)
    lookup.upsert.assert_not_called()
    lookup.update.assert_not_called()
    assert "user_roles" not in supabase.queries
    assert "profiles" not in supabase.queries


def test_user_roles_lookup(client, supabase, login_as):
    login_as(["admin"])
    supabase.rpc_results["get_user_roles"] = result(["warehouse_manager"])

    data = client.get("/admin/users/u-2/roles").json()["data"]

    assert data["roles"] == ["warehouse_manager"]
