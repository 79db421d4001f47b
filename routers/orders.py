# routers/orders.py

from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, AuthorizationError, NotFoundError, ValidationError, handle_supabase_error
from core.inventory import decrement_stock, restore_stock
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, get_current_user, requires_role
from models.enums import OrderStatus, Role
from models.order import PAYMENT_STATUS_ALIASES, OrderCancel, OrderCreate, OrderStatusUpdate


router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)

USER_CANCEL_WINDOW_MINUTES = 5


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


# ============================================================
# Helpers
# ============================================================
def fetch_order(client, order_id: str, company_id: str, select: str = "*, order_items(*)") -> dict:
    result = (
        client.table("orders")
        .select(select)
        .eq("id", order_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Order not found")
    return result.data[0]


def is_assigned_sales_executive(client, customer_user_id: str, company_id: str, sales_user_id: str) -> bool:
    result = (
        client.table("customers")
        .select("sales_executive_id")
        .eq("user_id", customer_user_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return bool(rows) and rows[0].get("sales_executive_id") == sales_user_id


def ensure_order_access(client, order: dict, current_user: CurrentUser, allow_owner: bool = True):
    """
    Access rules:
      - admin sees every order in the company
      - sales sees orders of customers assigned to them
      - the customer who placed the order sees their own
    """
    if current_user.is_admin:
        return

    if allow_owner and order.get("user_id") == current_user.id:
        return

    if Role.sales.value in current_user.roles and is_assigned_sales_executive(
        client, order.get("user_id"), current_user.company_id, current_user.id
    ):
        return

    raise AuthorizationError("You do not have permission to access this order")


def fetch_address(client, address_id: str, company_id: str, user_id: Optional[str] = None) -> Optional[dict]:
    query = (
        client.table("addresses")
        .select("*")
        .eq("id", address_id)
        .eq("company_id", company_id)
    )
    if user_id:
        query = query.eq("user_id", user_id)
    result = query.limit(1).execute()
    return result.data[0] if result.data else None


def resolve_order_addresses(client, payload: OrderCreate, user_id: str, company_id: str):
    """Shipping/billing ids must belong to the ordering customer; billing defaults to shipping."""
    shipping_id = payload.shipping_address_id
    billing_id = payload.billing_address_id

    if shipping_id and not fetch_address(client, shipping_id, company_id, user_id):
        raise ValidationError("Invalid shipping address")

    if billing_id and billing_id != shipping_id:
        if not fetch_address(client, billing_id, company_id, user_id):
            raise ValidationError("Invalid billing address")
    else:
        billing_id = shipping_id

    return shipping_id, billing_id


def _minutes_since(timestamp: str) -> float:
    created = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (datetime.now(timezone.utc) - created).total_seconds() / 60


# ============================================================
# MY ORDERS
# ============================================================
@router.get("/my-orders", summary="Orders placed by the current user")
def my_orders(current_user: CurrentUser = Depends(get_current_user)):
    result = (
        _client().table("orders")
        .select("*, order_items(*)")
        .eq("user_id", current_user.id)
        .eq("company_id", current_user.company_id)
        .order("created_at", desc=True)
        .execute()
    )
    return ok(result.data or [])


# ============================================================
# LIST (admin / sales)
# ============================================================
@router.get("/", summary="List company orders")
def list_orders(
    status: Optional[OrderStatus] = None,
    current_user: CurrentUser = Depends(requires_role([Role.admin.value, Role.sales.value])),
):
    client = _client()
    query = (
        client.table("orders")
        .select("*, order_items(*)")
        .eq("company_id", current_user.company_id)
    )
    if status:
        query = query.eq("status", status.value)

    # Sales executives only see orders of their own customers
    if not current_user.is_admin:
        customers = (
            client.table("customers")
            .select("user_id")
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
        user_ids = [c["user_id"] for c in customers.data or [] if c.get("user_id")]
        if not user_ids:
            return ok([])
        query = query.in_("user_id", user_ids)

    result = query.order("created_at", desc=True).execute()
    return ok(result.data or [])


# ============================================================
# GET ORDER
# ============================================================
@router.get("/{order_id}", summary="Get order details")
def get_order(order_id: str, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()
    order = fetch_order(client, order_id, current_user.company_id, "*, order_items(*, product:products(*))")
    ensure_order_access(client, order, current_user)

    if order.get("shipping_address_id"):
        address = fetch_address(client, order["shipping_address_id"], current_user.company_id)
        if address:
            order["shipping_address"] = address

    return ok(order)


# ============================================================
# CREATE ORDER
# ============================================================
@router.post("/", status_code=201, summary="Place an order")
def create_order(payload: OrderCreate, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()

    customer_user_id = current_user.id
    if payload.customer_user_id and payload.customer_user_id != current_user.id:
        if not current_user.is_admin and not (
            Role.sales.value in current_user.roles
            and is_assigned_sales_executive(client, payload.customer_user_id, current_user.company_id, current_user.id)
        ):
            raise AuthorizationError("You can only place orders for your assigned customers")
        customer_user_id = payload.customer_user_id

    shipping_address_id, billing_address_id = resolve_order_addresses(
        client, payload, customer_user_id, current_user.company_id
    )

    total = round(sum(item.price * item.quantity for item in payload.items), 2)

    order_row = {
        "user_id": customer_user_id,
        "company_id": current_user.company_id,
        "status": OrderStatus.pending.value,
        "payment_status": "pending",
        "total_amount": total,
        "shipping_address_id": shipping_address_id,
        "billing_address_id": billing_address_id,
        "payment_method": payload.payment_method,
        "payment_intent_id": payload.payment_intent_id,
        "notes": payload.notes,
        "inventory_updated": False,
    }

    try:
        created = client.table("orders").insert(order_row).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create order")

    if not created.data:
        raise ApiError(500, "Failed to create order")
    order = created.data[0]

    items = [
        {
            "order_id": order["id"],
            "company_id": current_user.company_id,
            "product_id": item.product_id,
            "variant_id": item.variant_id,
            "warehouse_id": item.warehouse_id,
            "quantity": item.quantity,
            "price": item.price,
        }
        for item in payload.items
    ]

    try:
        inserted = client.table("order_items").insert(items).execute()
    except Exception as e:
        logger.error(f"Order items insert failed for {order['id']}; removing order: {e}")
        client.table("orders").delete().eq("id", order["id"]).eq("company_id", current_user.company_id).execute()
        raise ApiError(500, "Failed to create order items")

    order["order_items"] = inserted.data or items
    logger.info(f"Order {order['id']} created for user {customer_user_id} ({total})")
    return ok(order)


# ============================================================
# UPDATE STATUS (admin / assigned sales executive)
# ============================================================
@router.put("/{order_id}/status", summary="Update order status")
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    current_user: CurrentUser = Depends(requires_role(
        [Role.admin.value, Role.sales.value],
        "Only admins and sales executives can update order status",
    )),
):
    client = _client()
    order = fetch_order(client, order_id, current_user.company_id, "*, order_items(product_id, quantity)")
    ensure_order_access(client, order, current_user, allow_owner=False)

    status = payload.status.value
    update = {"status": status}

    if status == OrderStatus.processing.value:
        update["inventory_updated"] = True
    elif status == OrderStatus.cancelled.value:
        update["inventory_updated"] = False

    if payload.tracking_number:
        update["tracking_number"] = payload.tracking_number
    if payload.estimated_delivery:
        update["estimated_delivery"] = payload.estimated_delivery
    if payload.notes:
        update["notes"] = payload.notes

    if payload.payment_status and payload.payment_status != order.get("payment_status"):
        update["payment_status"] = PAYMENT_STATUS_ALIASES.get(payload.payment_status, payload.payment_status)

    try:
        result = (
            client.table("orders")
            .update(update)
            .eq("id", order_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error updating order status", status_code=400)

    if not result.data:
        raise NotFoundError("Order not found")

    # Inventory side effects run after the order row is saved and never undo it
    items = order.get("order_items") or []
    if (
        status == OrderStatus.processing.value
        and order.get("status") != OrderStatus.processing.value
        and not order.get("inventory_updated")
    ):
        decrement_stock(items)
    elif status == OrderStatus.cancelled.value and order.get("inventory_updated"):
        restore_stock(items)

    return ok(result.data[0])


# ============================================================
# CANCEL ORDER (owner, admin, or assigned sales executive)
# ============================================================
@router.put("/{order_id}/cancel", summary="Cancel an order")
def cancel_order(
    order_id: str,
    payload: Optional[OrderCancel] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = _client()
    order = fetch_order(client, order_id, current_user.company_id, "*, order_items(product_id, quantity)")

    own_order = order.get("user_id") == current_user.id
    if own_order:
        if order.get("status") not in (OrderStatus.pending.value, OrderStatus.processing.value):
            raise ValidationError("Only pending or processing orders can be cancelled by user")
        if order.get("created_at") and _minutes_since(order["created_at"]) > USER_CANCEL_WINDOW_MINUTES:
            raise ValidationError("Orders can only be cancelled by user within 5 minutes of creation")
    else:
        ensure_order_access(client, order, current_user, allow_owner=False)
        if order.get("status") != OrderStatus.pending.value:
            raise ValidationError("Orders can only be cancelled by admin/sales if the status is pending")

    update = {"status": OrderStatus.cancelled.value, "inventory_updated": False}
    if payload and payload.reason:
        update["notes"] = payload.reason

    try:
        result = (
            client.table("orders")
            .update(update)
            .eq("id", order_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error cancelling order", status_code=400)

    if order.get("status") == OrderStatus.processing.value and order.get("inventory_updated"):
        restore_stock(order.get("order_items") or [])

    return ok((result.data or [None])[0], message="Order cancelled successfully")
