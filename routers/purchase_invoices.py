# routers/purchase_invoices.py

"""
Supplier (purchase) invoices. Payments against them live in
``routers.supplier_payments``, which keeps ``paid_amount``/``status`` current.
"""

from datetime import date
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import next_document_number, ok, sanitize
from dependencies.auth import CurrentUser, admin_only, get_current_user
from models.supplier import PurchaseInvoiceCreate, PurchaseInvoiceItem


router = APIRouter(
    prefix="/purchase-invoices",
    tags=["Purchase Invoices"],
)

INVOICE_SELECT = "*, suppliers (id, name, supplier_code)"
INVOICE_STATUSES = ("pending", "partial", "paid", "cancelled")


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def next_invoice_number(client, company_id: str, year: Optional[int] = None) -> str:
    return next_document_number(client, "purchase_invoices", "invoice_number", "INV", company_id, year)


def build_invoice_lines(items: List[PurchaseInvoiceItem], products: Dict[str, dict]) -> List[dict]:
    """
    Per line: tax = qty * unit_price * tax% / 100 (tax% defaults to the
    product's rate), line_total = qty * unit_price + tax - discount.
    """
    lines = []
    for item in items:
        product = products.get(item.product_id) or {}
        gross = item.quantity * item.unit_price
        tax_percentage = item.tax_percentage if item.tax_percentage is not None else (product.get("tax") or 0)
        tax_amount = round(gross * tax_percentage / 100, 2)

        lines.append({
            "product_id": item.product_id,
            "quantity": item.quantity,
            "unit": item.unit or product.get("unit_type") or "piece",
            "unit_price": item.unit_price,
            "tax_percentage": tax_percentage,
            "tax_amount": tax_amount,
            "discount_amount": item.discount_amount,
            "line_total": round(gross + tax_amount - item.discount_amount, 2),
            "hsn_code": product.get("hsn_code") or "",
            "product_code": product.get("product_code") or "",
        })
    return lines


def invoice_totals(payload: PurchaseInvoiceCreate, lines: List[dict]) -> dict:
    """Explicit header amounts win; otherwise they are summed from the lines."""
    subtotal = payload.subtotal
    if subtotal is None:
        subtotal = sum(line["quantity"] * line["unit_price"] for line in lines)

    tax = payload.tax_amount
    if tax is None:
        tax = sum(line["tax_amount"] for line in lines)

    return {
        "subtotal": round(subtotal, 2),
        "tax_amount": round(tax, 2),
        "discount_amount": payload.discount_amount,
        "total_amount": round(subtotal + tax - payload.discount_amount, 2),
    }


def _company_products(client, product_ids: List[str], company_id: str) -> Dict[str, dict]:
    if not product_ids:
        return {}
    try:
        result = (
            client.table("products")
            .select("id, unit_type, product_code, hsn_code, tax")
            .in_("id", product_ids)
            .eq("company_id", company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch product details")
    return {p["id"]: p for p in result.data or []}


# ============================================================
# LIST
# ============================================================
@router.get("/", summary="List purchase invoices")
def list_purchase_invoices(
    status: Optional[str] = None,
    supplier_id: Optional[str] = None,
    purchase_order_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    query = (
        _client().table("purchase_invoices")
        .select(INVOICE_SELECT)
        .eq("company_id", current_user.company_id)
    )

    if status:
        if status not in INVOICE_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(INVOICE_STATUSES)}")
        query = query.eq("status", status)
    if supplier_id:
        query = query.eq("supplier_id", supplier_id)
    if purchase_order_id:
        query = query.eq("purchase_order_id", purchase_order_id)
    if date_from:
        query = query.gte("invoice_date", date_from.isoformat())
    if date_to:
        query = query.lte("invoice_date", date_to.isoformat())

    try:
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch purchase invoices")

    return ok(result.data or [])


# ============================================================
# GET (with lines and payments)
# ============================================================
@router.get("/{invoice_id}", summary="Get purchase invoice")
def get_purchase_invoice(invoice_id: str, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()
    company_id = current_user.company_id

    result = (
        client.table("purchase_invoices")
        .select(f"{INVOICE_SELECT}, purchase_invoice_items (*)")
        .eq("id", invoice_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Purchase invoice not found")
    invoice = result.data[0]

    try:
        payments = (
            client.table("supplier_payments")
            .select("*")
            .eq("purchase_invoice_id", invoice_id)
            .eq("company_id", company_id)
            .order("payment_date", desc=True)
            .execute()
        )
        invoice["supplier_payments"] = payments.data or []
    except Exception as e:
        logger.warning(f"Could not load payments for purchase invoice {invoice_id}: {e}")
        invoice["supplier_payments"] = []

    return ok(invoice)


# ============================================================
# CREATE (admin / accounts)
# ============================================================
@router.post("/", status_code=201, summary="Record a purchase invoice")
def create_purchase_invoice(
    payload: PurchaseInvoiceCreate,
    current_user: CurrentUser = Depends(admin_only),
):
    client = _client()
    company_id = current_user.company_id

    supplier = (
        client.table("suppliers")
        .select("id")
        .eq("id", payload.supplier_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not supplier.data:
        raise NotFoundError("Supplier not found")

    product_ids = list(dict.fromkeys(item.product_id for item in payload.items))
    products = _company_products(client, product_ids, company_id)
    unknown = [pid for pid in product_ids if pid not in products]
    if unknown:
        raise ValidationError(f"Unknown products: {', '.join(unknown)}")

    lines = build_invoice_lines(payload.items, products)

    data = sanitize(payload.model_dump(mode="json", exclude={"items", "subtotal", "tax_amount", "discount_amount"}))
    data.update(invoice_totals(payload, lines))
    data.update({
        "company_id": company_id,
        "invoice_number": next_invoice_number(client, company_id),
        "paid_amount": 0,
        "status": "pending",
        "created_by": current_user.id,
    })

    try:
        result = client.table("purchase_invoices").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create purchase invoice")

    if not result.data:
        raise ApiError(500, "Failed to create purchase invoice")
    invoice = result.data[0]

    if lines:
        rows = [{**line, "purchase_invoice_id": invoice["id"], "company_id": company_id} for line in lines]
        try:
            inserted = client.table("purchase_invoice_items").insert(rows).execute()
        except Exception as e:
            logger.error(f"Invoice items insert failed for {invoice['id']}; removing invoice: {e}")
            client.table("purchase_invoices").delete().eq("id", invoice["id"]).eq("company_id", company_id).execute()
            raise ApiError(500, "Failed to create invoice items")
        invoice["purchase_invoice_items"] = inserted.data or rows

    logger.info(f"Purchase invoice {invoice.get('invoice_number')} recorded for supplier {payload.supplier_id}")
    return ok(invoice)
