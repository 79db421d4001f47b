# routers/admin.py

from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.errors import ApiError, AuthorizationError, NotFoundError, ValidationError
from core.logging_config import logger
from core.roles import assign_user_roles, get_all_roles, get_user_roles
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, admin_only, get_user_membership
from models.auth import UserRolesUpdate
from models.enums import Role


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)

ASSIGNABLE_ROLES = [
    Role.admin.value,
    Role.sales.value,
    Role.accounts.value,
    Role.user.value,
    Role.warehouse_manager.value,
]


# ============================================================
# LIST USERS IN THE COMPANY (with roles)
# ============================================================
@router.get("/users", summary="List company users with their roles")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(admin_only),
):
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    offset = (page - 1) * limit

    query = (
        client.table("profiles")
        .select("*", count="exact")
        .eq("company_id", current_user.company_id)
    )
    if search:
        term = f"%{search}%"
        query = query.or_(f"email.ilike.{term},first_name.ilike.{term},last_name.ilike.{term}")

    try:
        result = (
            query.order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching users: {e}")
        raise ApiError(500, "Error fetching users")

    users = []
    for row in result.data or []:
        roles = get_user_roles(row["id"], current_user.company_id)
        users.append({**row, "role": roles[0] if roles else row.get("role", "user"), "roles": roles})

    total = result.count or 0
    return ok({
        "users": users,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": -(-total // limit) if total else 0,
        },
    })


# ============================================================
# ROLE CATALOG
# ============================================================
@router.get("/roles", summary="All available roles")
def list_roles(current_user: CurrentUser = Depends(admin_only)):
    return ok(get_all_roles())


@router.get("/users/{user_id}/roles", summary="Roles of a user in the current company")
def user_roles(user_id: str, current_user: CurrentUser = Depends(admin_only)):
    return ok({
        "userId": user_id,
        "companyId": current_user.company_id,
        "roles": get_user_roles(user_id, current_user.company_id),
    })


# ============================================================
# ASSIGN ROLES (admin only, not accounts)
# ============================================================
@router.put("/users/{user_id}/roles", summary="Replace a user's roles")
def update_user_roles(
    user_id: str,
    payload: UserRolesUpdate,
    current_user: CurrentUser = Depends(admin_only),
):
    if not current_user.is_admin:
        raise AuthorizationError("Only administrators can change user roles")

    roles = payload.roles
    if not roles:
        raise ValidationError("Roles array is required and must not be empty")

    invalid = [r for r in roles if r not in ASSIGNABLE_ROLES]
    if invalid:
        raise ValidationError(
            f"Invalid roles: {', '.join(invalid)}. Valid roles are: {', '.join(ASSIGNABLE_ROLES)}"
        )

    if current_user.id == user_id and Role.admin.value not in roles:
        raise ValidationError("You cannot remove your own admin role")

    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    # Only users already active in this company can be re-roled
    if not get_user_membership(client, user_id, current_user.company_id):
        raise NotFoundError("User not found in this company")

    assigned = assign_user_roles(user_id, current_user.company_id, roles)

    # Mirror the primary role onto membership + profile
    primary = assigned[0] if assigned else Role.user.value
    try:
        (
            client.table("company_memberships")
            .update({"role": primary})
            .eq("user_id", user_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
        (
            client.table("profiles")
            .update({"role": primary})
            .eq("id", user_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error mirroring primary role for {user_id} (non-critical): {e}")

    return ok(
        {"userId": user_id, "companyId": current_user.company_id, "roles": assigned},
        message="User roles updated successfully",
    )
