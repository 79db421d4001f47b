# tests/test_orders.py

"""
Tests for order endpoints, access rules and inventory side effects.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from tests.conftest import COMPANY_ID


def _order(**overrides):
    order = {
        "id": "order-1",
        "user_id": "customer-1",
        "company_id": COMPANY_ID,
        "status": "pending",
        "payment_status": "pending",
        "inventory_updated": False,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "order_items": [{"product_id": "p-1", "quantity": 2}],
    }
    order.update(overrides)
    return order


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def test_create_order_computes_total(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    supabase.queue("orders", [{"id": "order-1", "total_amount": 25.0}])
    supabase.queue("order_items", [{"id": "item-1"}])

    response = client.post("/orders/", json={
        "items": [
            {"product_id": "p-1", "quantity": 2, "price": 10},
            {"product_id": "p-2", "quantity": 1, "price": 5},
        ],
    })

    assert response.status_code == 201
    inserted = supabase.queries["orders"][0].insert.call_args[0][0]
    assert inserted["total_amount"] == 25.0
    assert inserted["user_id"] == "customer-1"
    assert inserted["company_id"] == COMPANY_ID
    assert inserted["status"] == "pending"


def test_create_order_rejects_empty_items(client, supabase, login_as):
    login_as(["user"])
    response = client.post("/orders/", json={"items": []})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_sales_cannot_order_for_unassigned_customer(client, supabase, login_as):
    login_as(["sales"], user_id="sales-1")
    supabase.queue("customers", [{"sales_executive_id": "someone-else"}])

    response = client.post("/orders/", json={
        "items": [{"product_id": "p-1", "quantity": 1, "price": 1}],
        "customer_user_id": "customer-1",
    })

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You can only place orders for your assigned customers"


def test_failed_items_insert_removes_order(client, supabase, login_as):
    login_as(["user"])
    supabase.queue("orders", [{"id": "order-1"}])
    supabase.queue("order_items", error=RuntimeError("constraint"))

    response = client.post("/orders/", json={"items": [{"product_id": "p-1", "quantity": 1, "price": 1}]})

    assert response.status_code == 500
    supabase.queries["orders"][1].delete.assert_called_once()


def test_create_order_with_own_address(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    supabase.queue("addresses", [{"id": "addr-1", "user_id": "customer-1", "company_id": COMPANY_ID}])
    supabase.queue("orders", [{"id": "order-1"}])

    response = client.post("/orders/", json={
        "items": [{"product_id": "p-1", "quantity": 1, "price": 1}],
        "shipping_address_id": "addr-1",
    })

    assert response.status_code == 201
    lookup = supabase.queries["addresses"][0]
    lookup.eq.assert_any_call("id", "addr-1")
    lookup.eq.assert_any_call("company_id", COMPANY_ID)
    lookup.eq.assert_any_call("user_id", "customer-1")

    inserted = supabase.queries["orders"][0].insert.call_args[0][0]
    assert inserted["shipping_address_id"] == "addr-1"
    assert inserted["billing_address_id"] == "addr-1"


def test_create_order_rejects_address_outside_company(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    supabase.queue("addresses", [])

    response = client.post("/orders/", json={
        "items": [{"product_id": "p-1", "quantity": 1, "price": 1}],
        "shipping_address_id": "addr-elsewhere",
    })

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid shipping address"
    assert "orders" not in supabase.queries


def test_create_order_rejects_foreign_billing_address(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    supabase.queue("addresses", [{"id": "addr-1"}])
    supabase.queue("addresses", [])

    response = client.post("/orders/", json={
        "items": [{"product_id": "p-1", "quantity": 1, "price": 1}],
        "shipping_address_id": "addr-1",
        "billing_address_id": "addr-elsewhere",
    })

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid billing address"


# -----------------------------------------------------
# Read
# -----------------------------------------------------
def test_get_order_of_another_customer_forbidden(client, supabase, login_as):
    login_as(["user"], user_id="customer-2")
    supabase.queue("orders", [_order()])

    response = client.get("/orders/order-1")

    assert response.status_code == 403


def test_get_order_address_scoped_to_company(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order(shipping_address_id="addr-1")])
    supabase.queue("addresses", [])

    response = client.get("/orders/order-1")

    assert response.status_code == 200
    assert "shipping_address" not in response.json()["data"]
    filters = [c.args for c in supabase.queries["addresses"][0].eq.call_args_list]
    assert filters == [("id", "addr-1"), ("company_id", COMPANY_ID)]


def test_get_missing_order(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [])

    response = client.get("/orders/order-1")

    assert response.status_code == 404
    assert response.json()["error"] == {"message": "Order not found", "code": 404}


def test_sales_list_limited_to_own_customers(client, supabase, login_as):
    login_as(["sales"], user_id="sales-1")
    supabase.queue("customers", [])

    response = client.get("/orders/")

    assert response.json() == {"success": True, "data": []}


def test_plain_user_cannot_list_orders(client, supabase, login_as):
    login_as(["user"])
    assert client.get("/orders/").status_code == 403


# -----------------------------------------------------
# Status + inventory
# -----------------------------------------------------
def test_processing_decrements_stock_once(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order()])
    supabase.queue("orders", [_order(status="processing", inventory_updated=True)])

    with patch("routers.orders.decrement_stock") as decrement:
        response = client.put("/orders/order-1/status", json={"status": "processing"})

    assert response.status_code == 200
    decrement.assert_called_once_with([{"product_id": "p-1", "quantity": 2}])
    update = supabase.queries["orders"][1].update.call_args[0][0]
    assert update == {"status": "processing", "inventory_updated": True}


def test_already_processed_order_not_decremented_again(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order(status="processing", inventory_updated=True)])

    with patch("routers.orders.decrement_stock") as decrement:
        client.put("/orders/order-1/status", json={"status": "processing"})

    decrement.assert_not_called()


def test_cancelling_processed_order_restores_stock(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order(status="processing", inventory_updated=True)])

    with patch("routers.orders.restore_stock") as restore:
        client.put("/orders/order-1/status", json={"status": "cancelled"})

    restore.assert_called_once()


def test_payment_status_alias_mapped(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order()])

    client.put("/orders/order-1/status", json={"status": "shipped", "payment_status": "full_payment"})

    update = supabase.queries["orders"][1].update.call_args[0][0]
    assert update["payment_status"] == "paid"


def test_inventory_failure_keeps_status_update(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order()])
    supabase.queue("orders", [_order(status="processing")])
    supabase.rpc_results["decrement_quantity"] = RuntimeError("stock rpc down")

    response = client.put("/orders/order-1/status", json={"status": "processing"})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "processing"


# -----------------------------------------------------
# Cancel
# -----------------------------------------------------
def test_owner_cancel_window(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    old = (datetime.now(timezone.utc) - timedelta(minutes=10)).isoformat()
    supabase.queue("orders", [_order(created_at=old)])

    response = client.put("/orders/order-1/cancel", json={})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Orders can only be cancelled by user within 5 minutes of creation"


def test_owner_cancels_recent_order(client, supabase, login_as):
    login_as(["user"], user_id="customer-1")
    supabase.queue("orders", [_order()])
    supabase.queue("orders", [_order(status="cancelled")])

    response = client.put("/orders/order-1/cancel", json={"reason": "changed my mind"})

    assert response.status_code == 200
    assert response.json()["message"] == "Order cancelled successfully"


def test_admin_cannot_cancel_shipped_order(client, supabase, login_as):
    login_as(["admin"])
    supabase.queue("orders", [_order(status="shipped")])

    response = client.put("/orders/order-1/cancel", json={})

    assert response.status_code == 400
