# routers/invoices.py

from typing import Literal
from fastapi import APIRouter, Depends, Query, Response

from core.errors import ApiError, NotFoundError
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, get_current_user
from routers.orders import ensure_order_access, fetch_address, fetch_order
from services.invoice_pdf import render_bill_pdf


router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)

TAX_RATE = 0.05


def build_bill(order: dict, customer: dict = None, shipping_address: dict = None) -> dict:
    """Line totals, subtotal, tax and grand total for one order."""
    lines = []
    subtotal = 0.0

    for item in order.get("order_items") or []:
        quantity = item.get("quantity") or 0
        unit_price = float(item.get("unit_price") or item.get("price") or 0)
        line_total = round(quantity * unit_price, 2)
        subtotal += line_total
        lines.append({
            "product_id": item.get("product_id"),
            "name": (item.get("products") or {}).get("name") or "Product",
            "quantity": quantity,
            "unit_price": unit_price,
            "total": line_total,
        })

    subtotal = round(subtotal, 2)
    tax = round(subtotal * TAX_RATE, 2)

    return {
        "invoice_number": str(order["id"])[:8].upper(),
        "order_id": order["id"],
        "date": order.get("created_at"),
        "status": order.get("status"),
        "payment_status": order.get("payment_status"),
        "payment_method": order.get("payment_method"),
        "bill_to": customer or {},
        "shipping_address": shipping_address,
        "items": lines,
        "subtotal": subtotal,
        "tax": tax,
        "total": round(subtotal + tax, 2),
    }


@router.get("/customer/{order_id}", summary="Customer bill for an order")
def get_customer_bill(
    order_id: str,
    format: Literal["pdf", "json"] = Query("pdf"),
    current_user: CurrentUser = Depends(get_current_user),
):
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    order = fetch_order(client, order_id, current_user.company_id, "*, order_items (*, products (*))")
    ensure_order_access(client, order, current_user)

    customer = None
    if order.get("user_id"):
        result = (
            client.table("customers")
            .select("name, email, phone")
            .eq("user_id", order["user_id"])
            .eq("company_id", current_user.company_id)
            .limit(1)
            .execute()
        )
        customer = result.data[0] if result.data else None

    address = None
    if order.get("shipping_address_id"):
        try:
            address = fetch_address(client, order["shipping_address_id"], current_user.company_id)
        except Exception as e:
            logger.warning(f"Could not load shipping address for order {order_id}: {e}")

    if not order.get("order_items"):
        raise NotFoundError("Order has no items to bill")

    bill = build_bill(order, customer, address)
    if format == "json":
        return ok(bill)

    return Response(
        content=render_bill_pdf(bill),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{bill["invoice_number"].lower()}.pdf"'},
    )
