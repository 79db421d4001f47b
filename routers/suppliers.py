# routers/suppliers.py

from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize
from dependencies.auth import CurrentUser, admin_only, get_current_user
from models.supplier import SupplierCreate, SupplierUpdate


router = APIRouter(
    prefix="/suppliers",
    tags=["Suppliers"],
)

SUPPLIER_SELECT = "*, supplier_bank_accounts (*)"


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def _fetch_supplier(client, supplier_id: str, company_id: str) -> Optional[dict]:
    result = (
        client.table("suppliers")
        .select(SUPPLIER_SELECT)
        .eq("id", supplier_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def _insert_bank_accounts(client, supplier_id: str, company_id: str, accounts):
    """Bank account failures are logged; the supplier row is already saved."""
    if not accounts:
        return
    try:
        client.table("supplier_bank_accounts").insert([
            {**account.model_dump(), "supplier_id": supplier_id, "company_id": company_id}
            for account in accounts
        ]).execute()
    except Exception as e:
        logger.error(f"Error saving bank accounts for supplier {supplier_id}: {e}")


# ============================================================
# LIST
# ============================================================
@router.get("/", summary="List suppliers")
def list_suppliers(
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    query = (
        _client().table("suppliers")
        .select(SUPPLIER_SELECT)
        .eq("company_id", current_user.company_id)
    )

    if is_active is not None:
        query = query.eq("is_active", is_active)
    if search:
        query = query.or_(f"name.ilike.%{search}%,supplier_code.ilike.%{search}%,email.ilike.%{search}%")

    try:
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch suppliers")

    return ok(result.data or [])


# ============================================================
# GET
# ============================================================
@router.get("/{supplier_id}", summary="Get supplier")
def get_supplier(supplier_id: str, current_user: CurrentUser = Depends(get_current_user)):
    supplier = _fetch_supplier(_client(), supplier_id, current_user.company_id)
    if not supplier:
        raise NotFoundError("Supplier not found")
    return ok(supplier)


# ============================================================
# CREATE
# ============================================================
@router.post("/", status_code=201, summary="Create supplier")
def create_supplier(payload: SupplierCreate, current_user: CurrentUser = Depends(admin_only)):
    client = _client()

    data = sanitize(payload.model_dump(exclude={"bank_accounts"}))
    data.update({
        "company_id": current_user.company_id,
        "created_by": current_user.id,
        "is_active": True,
    })

    try:
        result = client.table("suppliers").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create supplier")

    if not result.data:
        raise ApiError(500, "Failed to create supplier")
    supplier = result.data[0]

    _insert_bank_accounts(client, supplier["id"], current_user.company_id, payload.bank_accounts)

    logger.info(f"Supplier {supplier['id']} created by {current_user.id}")
    return ok(_fetch_supplier(client, supplier["id"], current_user.company_id) or supplier)


# ============================================================
# UPDATE
# ============================================================
@router.put("/{supplier_id}", summary="Update supplier")
def update_supplier(
    supplier_id: str,
    payload: SupplierUpdate,
    current_user: CurrentUser = Depends(admin_only),
):
    data = sanitize(payload.model_dump(exclude_unset=True))
    if not data:
        raise ValidationError("No fields to update")
    data["updated_at"] = datetime.now(timezone.utc).isoformat()

    try:
        result = (
            _client().table("suppliers")
            .update(data)
            .eq("id", supplier_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update supplier")

    if not result.data:
        raise NotFoundError("Supplier not found")

    return ok(result.data[0])


# ============================================================
# SOFT DELETE
# ============================================================
@router.delete("/{supplier_id}", summary="Deactivate supplier")
def delete_supplier(supplier_id: str, current_user: CurrentUser = Depends(admin_only)):
    try:
        result = (
            _client().table("suppliers")
            .update({"is_active": False, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", supplier_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete supplier")

    if not result.data:
        raise NotFoundError("Supplier not found")

    return ok(message="Supplier deleted successfully")
