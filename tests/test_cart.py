# tests/test_cart.py

"""
Tests for the per-user, per-company shopping cart.
"""

from tests.conftest import COMPANY_ID


def _filters(query):
    return [c.args for c in query.eq.call_args_list]


def test_cart_requires_login(client, supabase, company):
    assert client.get("/cart/").status_code == 401


def test_get_cart_scoped_to_user_and_company(client, supabase, login_as):
    user = login_as()
    supabase.queue("carts", [{"id": "cart-1"}])
    supabase.queue("cart_items", [{"id": "ci-1", "quantity": 2, "products": {"id": "p-1"}}])

    response = client.get("/cart/")

    assert response.status_code == 200
    assert response.json()["data"][0]["id"] == "ci-1"
    assert _filters(supabase.queries["carts"][0]) == [("user_id", user.id), ("company_id", COMPANY_ID)]
    assert _filters(supabase.queries["cart_items"][0]) == [("cart_id", "cart-1"), ("company_id", COMPANY_ID)]


def test_cart_created_on_first_use(client, supabase, login_as):
    user = login_as()
    supabase.queue("carts", [])
    supabase.queue("carts", [{"id": "cart-new"}])

    response = client.get("/cart/")

    assert response.status_code == 200
    supabase.queries["carts"][1].insert.assert_called_once_with({"user_id": user.id, "company_id": COMPANY_ID})
    assert ("cart_id", "cart-new") in _filters(supabase.queries["cart_items"][0])


def test_add_new_product(client, supabase, login_as):
    login_as()
    supabase.queue("carts", [{"id": "cart-1"}])
    supabase.queue("products", [{"id": "p-1", "is_active": True}])
    supabase.queue("cart_items", [])

    response = client.post("/cart/", json={"product_id": "p-1", "quantity": 2})

    assert response.status_code == 200
    assert response.json()["message"] == "Item added to cart"
    supabase.queries["cart_items"][1].insert.assert_called_once_with({
        "cart_id": "cart-1",
        "product_id": "p-1",
        "quantity": 2,
        "company_id": COMPANY_ID,
    })


def test_add_existing_product_merges_quantity(client, supabase, login_as):
    login_as()
    supabase.queue("carts", [{"id": "cart-1"}])
    supabase.queue("products", [{"id": "p-1", "is_active": True}])
    supabase.queue("cart_items", [{"id": "ci-1", "quantity": 2}])

    client.post("/cart/", json={"product_id": "p-1", "quantity": 3})

    merge = supabase.queries["cart_items"][1]
    merge.update.assert_called_once_with({"quantity": 5})
    merge.insert.assert_not_called()


def test_add_inactive_product_rejected(client, supabase, login_as):
    login_as()
    supabase.queue("carts", [{"id": "cart-1"}])
    supabase.queue("products", [{"id": "p-1", "is_active": False}])

    response = client.post("/cart/", json={"product_id": "p-1", "quantity": 1})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Product is not active"
    assert "cart_items" not in supabase.queries


def test_add_product_from_another_company(client, supabase, login_as):
    login_as()
    supabase.queue("carts", [{"id": "cart-1"}])

    response = client.post("/cart/", json={"product_id": "p-other", "quantity": 1})

    assert response.status_code == 404
    assert ("company_id", COMPANY_ID) in _filters(supabase.queries["products"][0])


def test_zero_quantity_rejected(client, supabase, login_as):
    login_as()
    assert client.post("/cart/", json={"product_id": "p-1", "quantity": 0}).status_code == 400


def test_update_own_cart_item(client, supabase, login_as):
    login_as()
    supabase.queue("cart_items", [{"id": "ci-1", "cart_id": "cart-1"}])
    supabase.queue("carts", [{"id": "cart-1"}])

    response = client.put("/cart/ci-1", json={"quantity": 4})

    assert response.status_code == 200
    supabase.queries["cart_items"][1].update.assert_called_once_with({"quantity": 4})


def test_update_someone_elses_cart_item(client, supabase, login_as):
    login_as()
    supabase.queue("cart_items", [{"id": "ci-1", "cart_id": "cart-9"}])
    supabase.queue("carts", [])

    response = client.put("/cart/ci-1", json={"quantity": 4})

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Not authorized to update this cart item"
    assert len(supabase.queries["cart_items"]) == 1


def test_remove_missing_cart_item(client, supabase, login_as):
    login_as()
    supabase.queue("cart_items", [])

    response = client.delete("/cart/ci-404")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Cart item not found"


def test_clear_cart(client, supabase, login_as):
    user = login_as()

    response = client.delete("/cart/")

    assert response.json()["message"] == "Cart cleared"
    query = supabase.queries["carts"][0]
    query.delete.assert_called_once()
    assert _filters(query) == [("user_id", user.id), ("company_id", COMPANY_ID)]
