# routers/warehouses.py

from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize
from dependencies.auth import CurrentUser, admin_only, get_current_user
from models.warehouse import WarehouseCreate, WarehouseUpdate


router = APIRouter(
    prefix="/warehouses",
    tags=["Warehouses"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


# ============================================================
# LIST
# ============================================================
@router.get("/", summary="List warehouses")
def list_warehouses(
    is_active: Optional[bool] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    query = (
        _client().table("warehouses")
        .select("*")
        .eq("company_id", current_user.company_id)
    )
    if is_active is not None:
        query = query.eq("is_active", is_active)

    try:
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Error fetching warehouses")

    return ok(result.data or [])


# ============================================================
# GET
# ============================================================
@router.get("/{warehouse_id}", summary="Get warehouse")
def get_warehouse(warehouse_id: str, current_user: CurrentUser = Depends(get_current_user)):
    result = (
        _client().table("warehouses")
        .select("*")
        .eq("id", warehouse_id)
        .eq("company_id", current_user.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Warehouse not found")
    return ok(result.data[0])


# ============================================================
# CREATE
# ============================================================
@router.post("/", status_code=201, summary="Create warehouse")
def create_warehouse(payload: WarehouseCreate, current_user: CurrentUser = Depends(admin_only)):
    data = sanitize(payload.model_dump(mode="json"))
    data["company_id"] = current_user.company_id

    try:
        result = _client().table("warehouses").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Error creating warehouse", status_code=400)

    if not result.data:
        raise ApiError(500, "Error creating warehouse")

    logger.info(f"Warehouse {data['code']} created in company {current_user.company_id}")
    return ok(result.data[0])


# ============================================================
# UPDATE
# ============================================================
@router.put("/{warehouse_id}", summary="Update warehouse")
def update_warehouse(
    warehouse_id: str,
    payload: WarehouseUpdate,
    current_user: CurrentUser = Depends(admin_only),
):
    data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    if not data:
        raise ValidationError("No fields to update")
    data["updated_at"] = datetime.now(timezone.utc).isoformat()

    try:
        result = (
            _client().table("warehouses")
            .update(data)
            .eq("id", warehouse_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error updating warehouse", status_code=400)

    if not result.data:
        raise NotFoundError("Warehouse not found")
    return ok(result.data[0])


# ============================================================
# SOFT DELETE
# ============================================================
@router.delete("/{warehouse_id}", summary="Deactivate warehouse")
def delete_warehouse(warehouse_id: str, current_user: CurrentUser = Depends(admin_only)):
    try:
        result = (
            _client().table("warehouses")
            .update({"is_active": False, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", warehouse_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error deleting warehouse")

    if not result.data:
        raise NotFoundError("Warehouse not found")

    return ok(result.data[0], message="Warehouse deactivated successfully")
