# routers/warehouse_managers.py

from fastapi import APIRouter, Depends, Response

from core.errors import ApiError, AuthorizationError, NotFoundError
from core.roles import get_user_warehouses, has_warehouse_access
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, admin_only, get_current_user, requires_warehouse_manager
from models.warehouse_manager import WarehouseManagerAssign


router = APIRouter(
    prefix="/warehouse-managers",
    tags=["Warehouse Managers"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def _profiles_by_id(client, user_ids) -> dict:
    if not user_ids:
        return {}
    try:
        result = (
            client.table("profiles")
            .select("id, email, first_name, last_name")
            .in_("id", list(user_ids))
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching profiles: {e}")
        return {}
    return {p["id"]: p for p in result.data or []}


# ============================================================
# ASSIGN (re-activates an existing assignment)
# ============================================================
@router.post("/", status_code=201, summary="Assign a warehouse manager")
def assign_warehouse_manager(
    payload: WarehouseManagerAssign,
    response: Response,
    current_user: CurrentUser = Depends(admin_only),
):
    client = _client()
    company_id = current_user.company_id

    warehouse = (
        client.table("warehouses")
        .select("id")
        .eq("id", payload.warehouse_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not warehouse.data:
        raise NotFoundError("Warehouse not found")

    existing = (
        client.table("warehouse_managers")
        .select("id")
        .eq("user_id", payload.user_id)
        .eq("warehouse_id", payload.warehouse_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )

    if existing.data:
        try:
            updated = (
                client.table("warehouse_managers")
                .update({"is_active": True})
                .eq("id", existing.data[0]["id"])
                .eq("company_id", company_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update warehouse manager assignment: {e}")
            raise ApiError(500, "Failed to update warehouse manager assignment")

        response.status_code = 200
        return ok((updated.data or [None])[0], message="Warehouse manager assignment updated")

    try:
        created = (
            client.table("warehouse_managers")
            .insert({
                "user_id": payload.user_id,
                "warehouse_id": payload.warehouse_id,
                "company_id": company_id,
                "is_active": True,
            })
            .execute()
        )
    except Exception as e:
        logger.error(f"Error assigning warehouse manager: {e}")
        raise ApiError(500, "Failed to assign warehouse manager")

    logger.info(f"User {payload.user_id} now manages warehouse {payload.warehouse_id}")
    return ok((created.data or [None])[0], message="Warehouse manager assigned successfully")


# ============================================================
# LIST ALL ASSIGNMENTS
# ============================================================
@router.get("/", summary="All active warehouse manager assignments")
def list_warehouse_managers(current_user: CurrentUser = Depends(admin_only)):
    client = _client()

    try:
        result = (
            client.table("warehouse_managers")
            .select("*")
            .eq("company_id", current_user.company_id)
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching warehouse managers: {e}")
        raise ApiError(500, "Failed to fetch warehouse managers")

    assignments = result.data or []
    if not assignments:
        return ok([])

    profiles = _profiles_by_id(client, {a["user_id"] for a in assignments})

    warehouse_ids = list({a["warehouse_id"] for a in assignments})
    try:
        wh = client.table("warehouses").select("id, name, code").in_("id", warehouse_ids).execute()
        warehouses = {w["id"]: w for w in wh.data or []}
    except Exception as e:
        logger.error(f"Error fetching warehouses: {e}")
        warehouses = {}

    return ok([
        {
            **a,
            "profiles": profiles.get(a["user_id"]),
            "warehouses": warehouses.get(a["warehouse_id"]),
        }
        for a in assignments
    ])


# ============================================================
# MANAGERS OF ONE WAREHOUSE
# ============================================================
@router.get("/warehouse/{warehouse_id}", summary="Managers assigned to a warehouse")
def warehouse_managers(warehouse_id: str, current_user: CurrentUser = Depends(admin_only)):
    client = _client()

    try:
        result = (
            client.table("warehouse_managers")
            .select("*")
            .eq("warehouse_id", warehouse_id)
            .eq("company_id", current_user.company_id)
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching warehouse managers: {e}")
        raise ApiError(500, "Failed to fetch warehouse managers")

    managers = result.data or []
    profiles = _profiles_by_id(client, {m["user_id"] for m in managers})

    return ok([{**m, "profiles": profiles.get(m["user_id"])} for m in managers])


# ============================================================
# WAREHOUSES OF ONE USER
# ============================================================
@router.get("/user/{user_id}", summary="Warehouses assigned to a user")
def user_warehouses(user_id: str, current_user: CurrentUser = Depends(get_current_user)):
    if user_id != current_user.id and not current_user.has_any_role(["accounts"]):
        raise AuthorizationError("You can only view your own warehouse assignments")

    client = _client()

    try:
        result = (
            client.table("warehouse_managers")
            .select("*, warehouses:warehouse_id (id, name, code, address, city, state, country, is_active)")
            .eq("user_id", user_id)
            .eq("company_id", current_user.company_id)
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching user warehouses: {e}")
        raise ApiError(500, "Failed to fetch user warehouses")

    return ok(result.data or [])


# ============================================================
# CURRENT WAREHOUSE MANAGER
# ============================================================
@router.get("/me", summary="Warehouse ids managed by the current user")
def my_warehouses(current_user: CurrentUser = Depends(requires_warehouse_manager)):
    return ok(get_user_warehouses(current_user.id, current_user.company_id))


@router.get("/access/{warehouse_id}", summary="Whether the current user may operate a warehouse")
def warehouse_access(warehouse_id: str, current_user: CurrentUser = Depends(get_current_user)):
    allowed = current_user.is_admin or has_warehouse_access(current_user.id, current_user.company_id, warehouse_id)
    return ok({"warehouse_id": warehouse_id, "has_access": allowed})


# ============================================================
# REMOVE ASSIGNMENT
# ============================================================
@router.delete("/{user_id}/{warehouse_id}", summary="Remove a warehouse manager assignment")
def remove_warehouse_manager(
    user_id: str,
    warehouse_id: str,
    current_user: CurrentUser = Depends(admin_only),
):
    client = _client()

    try:
        (
            client.table("warehouse_managers")
            .delete()
            .eq("user_id", user_id)
            .eq("warehouse_id", warehouse_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error removing warehouse manager: {e}")
        raise ApiError(500, "Failed to remove warehouse manager")

    return ok(message="Warehouse manager assignment removed successfully")
