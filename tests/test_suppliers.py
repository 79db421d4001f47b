# tests/test_suppliers.py

from tests.conftest import COMPANY_ID


def test_list_suppliers_scoped_to_company(client, supabase, login_as):
    login_as(["procurement"])
    supabase.queue("suppliers", [{"id": "sup-1", "name": "Farm Co"}])

    response = client.get("/suppliers/", params={"search": "farm", "is_active": True})

    assert response.json()["data"] == [{"id": "sup-1", "name": "Farm Co"}]
    query = supabase.queries["suppliers"][0]
    query.eq.assert_any_call("company_id", COMPANY_ID)
    query.eq.assert_any_call("is_active", True)
    query.or_.assert_called_once_with("name.ilike.%farm%,supplier_code.ilike.%farm%,email.ilike.%farm%")


def test_create_supplier_requires_admin_or_accounts(client, supabase, login_as):
    login_as(["sales"])
    response = client.post("/suppliers/", json={"name": "Farm Co"})

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Admin or Accounts access required"


def test_create_supplier_with_bank_accounts(client, supabase, login_as):
    user = login_as(["accounts"])
    supabase.queue("suppliers", [{"id": "sup-1", "name": "Farm Co"}])

    response = client.post("/suppliers/", json={
        "name": " Farm Co ",
        "email": "",
        "bank_accounts": [{"bank_name": "Gulf Bank", "account_number": "123"}],
    })

    assert response.status_code == 201
    inserted = supabase.queries["suppliers"][0].insert.call_args[0][0]
    assert inserted["name"] == "Farm Co"
    assert inserted["email"] is None
    assert inserted["created_by"] == user.id
    assert inserted["is_active"] is True
    assert "bank_accounts" not in inserted

    accounts = supabase.queries["supplier_bank_accounts"][0].insert.call_args[0][0]
    assert accounts[0]["supplier_id"] == "sup-1"
    assert accounts[0]["company_id"] == COMPANY_ID


def test_bank_account_failure_keeps_supplier(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("suppliers", [{"id": "sup-1", "name": "Farm Co"}])
    supabase.queue("supplier_bank_accounts", error=RuntimeError("duplicate"))

    response = client.post("/suppliers/", json={
        "name": "Farm Co",
        "bank_accounts": [{"bank_name": "Gulf Bank", "account_number": "123"}],
    })

    assert response.status_code == 201


def test_get_missing_supplier(client, supabase, login_as):
    login_as(["procurement"])
    response = client.get("/suppliers/sup-404")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Supplier not found"


def test_update_without_fields(client, supabase, login_as):
    login_as(["admin"])
    response = client.put("/suppliers/sup-1", json={})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No fields to update"


def test_delete_is_soft(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("suppliers", [{"id": "sup-1", "is_active": False}])

    response = client.delete("/suppliers/sup-1")

    assert response.json()["message"] == "Supplier deleted successfully"
    update = supabase.queries["suppliers"][0].update.call_args[0][0]
    assert update["is_active"] is False
    supabase.queries["suppliers"][0].delete.assert_not_called()
