# routers/supplier_payments.py

from datetime import date, datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import next_document_number, ok, sanitize
from dependencies.auth import CurrentUser, get_current_user, requires_accounts
from models.enums import SupplierPaymentStatus
from models.supplier import SupplierPaymentCreate, SupplierPaymentUpdate


router = APIRouter(
    prefix="/supplier-payments",
    tags=["Supplier Payments"],
)

PAYMENT_SELECT = "*, purchase_invoices (*), suppliers (*)"

# completed and cancelled are terminal
ALLOWED_TRANSITIONS = {
    SupplierPaymentStatus.pending: {SupplierPaymentStatus.processing, SupplierPaymentStatus.cancelled},
    SupplierPaymentStatus.processing: {
        SupplierPaymentStatus.completed,
        SupplierPaymentStatus.failed,
        SupplierPaymentStatus.cancelled,
    },
    SupplierPaymentStatus.failed: {
        SupplierPaymentStatus.pending,
        SupplierPaymentStatus.processing,
        SupplierPaymentStatus.cancelled,
    },
    SupplierPaymentStatus.completed: set(),
    SupplierPaymentStatus.cancelled: set(),
}


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def allowed_transitions(current: str) -> str:
    try:
        allowed = ALLOWED_TRANSITIONS[SupplierPaymentStatus(current)]
    except ValueError:
        return ""
    return ", ".join(s.value for s in SupplierPaymentStatus if s in allowed)


def can_transition(current: str, target: str, is_admin: bool = False) -> bool:
    """Admins may settle a pending payment directly (pending → completed)."""
    if is_admin and current == SupplierPaymentStatus.pending.value and target == SupplierPaymentStatus.completed.value:
        return True
    try:
        allowed = ALLOWED_TRANSITIONS[SupplierPaymentStatus(current)]
    except ValueError:
        return False
    return SupplierPaymentStatus(target) in allowed


def next_payment_number(client, company_id: str, year: Optional[int] = None) -> str:
    return next_document_number(client, "supplier_payments", "payment_number", "PAY", company_id, year)


def invoice_status(paid: float, total: float) -> str:
    if total is not None and paid >= total:
        return "paid"
    if paid > 0:
        return "partial"
    return "pending"


def refresh_invoice_totals(client, invoice_id: str, company_id: str):
    """Recompute paid_amount/status of a purchase invoice from its payments."""
    try:
        payments = (
            client.table("supplier_payments")
            .select("amount, status")
            .eq("purchase_invoice_id", invoice_id)
            .eq("company_id", company_id)
            .execute()
        )
        paid = sum(
            p.get("amount") or 0
            for p in payments.data or []
            if p.get("status") not in (SupplierPaymentStatus.cancelled.value, SupplierPaymentStatus.failed.value)
        )

        invoice = (
            client.table("purchase_invoices")
            .select("total_amount")
            .eq("id", invoice_id)
            .eq("company_id", company_id)
            .limit(1)
            .execute()
        )
        if not invoice.data:
            return

        client.table("purchase_invoices").update({
            "paid_amount": paid,
            "status": invoice_status(paid, invoice.data[0].get("total_amount") or 0),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", invoice_id).eq("company_id", company_id).execute()
    except Exception as e:
        logger.error(f"Error updating purchase invoice {invoice_id} totals: {e}")


def ensure_within_balance(amount: float, invoice: dict, already_paid: float):
    if invoice.get("status") == "cancelled":
        raise ValidationError("Cannot record payment for a cancelled invoice")

    remaining = (invoice.get("total_amount") or 0) - already_paid
    if amount > remaining:
        raise ValidationError(
            f"Payment amount ({amount}) exceeds invoice balance ({remaining}). "
            f"Total invoice amount: {invoice.get('total_amount')}, Already paid: {already_paid}"
        )


def _fetch_invoice(client, invoice_id: str, company_id: str) -> dict:
    result = (
        client.table("purchase_invoices")
        .select("id, total_amount, paid_amount, status")
        .eq("id", invoice_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Purchase invoice not found")
    return result.data[0]


def _fetch_payment(client, payment_id: str, company_id: str) -> dict:
    result = (
        client.table("supplier_payments")
        .select(PAYMENT_SELECT)
        .eq("id", payment_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Supplier payment not found")
    return result.data[0]


# ============================================================
# LIST
# ============================================================
@router.get("/", summary="List supplier payments")
def list_supplier_payments(
    supplier_id: Optional[str] = None,
    status: Optional[SupplierPaymentStatus] = None,
    payment_method: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    query = (
        _client().table("supplier_payments")
        .select(PAYMENT_SELECT)
        .eq("company_id", current_user.company_id)
    )

    if supplier_id:
        query = query.eq("supplier_id", supplier_id)
    if status:
        query = query.eq("status", status.value)
    if payment_method:
        query = query.eq("payment_method", payment_method)
    if date_from:
        query = query.gte("payment_date", date_from.isoformat())
    if date_to:
        query = query.lte("payment_date", date_to.isoformat())

    try:
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch supplier payments")

    return ok(result.data or [])


# ============================================================
# GET
# ============================================================
@router.get("/{payment_id}", summary="Get supplier payment")
def get_supplier_payment(payment_id: str, current_user: CurrentUser = Depends(get_current_user)):
    return ok(_fetch_payment(_client(), payment_id, current_user.company_id))


# ============================================================
# CREATE (accounts)
# ============================================================
@router.post("/", status_code=201, summary="Record a supplier payment")
def create_supplier_payment(
    payload: SupplierPaymentCreate,
    current_user: CurrentUser = Depends(requires_accounts),
):
    client = _client()
    company_id = current_user.company_id

    invoice = _fetch_invoice(client, payload.purchase_invoice_id, company_id)
    if invoice.get("status") == "paid":
        raise ValidationError("Invoice is already fully paid")
    ensure_within_balance(payload.amount, invoice, invoice.get("paid_amount") or 0)

    data = sanitize(payload.model_dump(mode="json"))
    data.update({
        "company_id": company_id,
        "payment_number": next_payment_number(client, company_id),
        "status": SupplierPaymentStatus.pending.value,
        "created_by": current_user.id,
    })

    try:
        result = client.table("supplier_payments").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create supplier payment")

    if not result.data:
        raise ApiError(500, "Failed to create supplier payment")
    payment = result.data[0]

    refresh_invoice_totals(client, payload.purchase_invoice_id, company_id)

    logger.info(f"Supplier payment {payment.get('payment_number')} recorded for invoice {payload.purchase_invoice_id}")
    return ok(payment)


# ============================================================
# UPDATE (status transitions validated)
# ============================================================
@router.put("/{payment_id}", summary="Update supplier payment")
def update_supplier_payment(
    payment_id: str,
    payload: SupplierPaymentUpdate,
    current_user: CurrentUser = Depends(requires_accounts),
):
    client = _client()
    existing = _fetch_payment(client, payment_id, current_user.company_id)

    data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    if not data:
        raise ValidationError("No fields to update")

    if "amount" in data and existing.get("purchase_invoice_id"):
        invoice = _fetch_invoice(client, existing["purchase_invoice_id"], current_user.company_id)
        others = (
            client.table("supplier_payments")
            .select("id, amount, status")
            .eq("purchase_invoice_id", existing["purchase_invoice_id"])
            .eq("company_id", current_user.company_id)
            .execute()
        )
        paid_elsewhere = sum(
            p.get("amount") or 0
            for p in others.data or []
            if p.get("status") == SupplierPaymentStatus.completed.value and p.get("id") != payment_id
        )
        ensure_within_balance(data["amount"], invoice, paid_elsewhere)

    target = data.get("status")
    if target and not can_transition(existing.get("status"), target, current_user.is_admin):
        raise ValidationError(
            f"Cannot change payment status from {existing.get('status')} to {target}. "
            f"Allowed transitions: {allowed_transitions(existing.get('status')) or 'none (terminal state)'}"
        )

    data["updated_at"] = datetime.now(timezone.utc).isoformat()

    try:
        result = (
            client.table("supplier_payments")
            .update(data)
            .eq("id", payment_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update supplier payment")

    if not result.data:
        raise NotFoundError("Supplier payment not found")

    if ("amount" in data or target) and existing.get("purchase_invoice_id"):
        refresh_invoice_totals(client, existing["purchase_invoice_id"], current_user.company_id)

    return ok(result.data[0])
