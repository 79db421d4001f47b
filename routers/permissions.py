# routers/permissions.py

from fastapi import APIRouter, Depends, Query

from core.access_filter import filter_modules, filter_sidebar_groups, filter_menu_items
from core.modules_config import all_modules
from core.permissions import get_company_modules, get_user_accessible_modules, get_user_permissions
from core.route_guard import evaluate_path
from core.sidebar_config import DASHBOARD_ITEM, all_groups
from core.utils import ok
from dependencies.auth import CurrentUser, get_current_user, get_optional_auth
from models.access import NavigationResponse


router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)


# -----------------------------------------------------
# GET /permissions/me
# -----------------------------------------------------
@router.get("/me", summary="Permission codes granted in the current company")
def my_permissions(current_user: CurrentUser = Depends(get_current_user)):
    permissions = get_user_permissions(current_user.id, current_user.company_id)
    return ok([p.model_dump() for p in permissions])


# -----------------------------------------------------
# GET /permissions/modules
# -----------------------------------------------------
@router.get("/modules", summary="Modules the current user may open")
def my_modules(current_user: CurrentUser = Depends(get_current_user)):
    return ok(get_user_accessible_modules(current_user.id, current_user.company_id))


# -----------------------------------------------------
# GET /permissions/company-modules
# -----------------------------------------------------
@router.get("/company-modules", summary="Modules enabled for the current company")
def company_modules(current_user: CurrentUser = Depends(get_current_user)):
    return ok(get_company_modules(current_user.company_id))


# -----------------------------------------------------
# GET /permissions/navigation
# Sidebar groups filtered by role + modules filtered by permission
# -----------------------------------------------------
@router.get("/navigation", summary="Filtered sidebar and module tree")
def navigation(current_user: CurrentUser = Depends(get_current_user)):
    codes = [p.permission_code for p in get_user_permissions(current_user.id, current_user.company_id)]
    enabled = get_company_modules(current_user.company_id)

    nav = NavigationResponse(
        groups=filter_sidebar_groups(all_groups(), current_user.roles),
        modules=filter_modules(all_modules(), codes, enabled),
    )
    body = nav.model_dump()
    body["dashboard"] = [item.model_dump() for item in filter_menu_items([DASHBOARD_ITEM], current_user.roles)]
    return ok(body)


# -----------------------------------------------------
# GET /permissions/route-access?path=/admin/orders
# -----------------------------------------------------
@router.get("/route-access", summary="Route guard decision for a frontend path")
def route_access(
    path: str = Query(..., min_length=1),
    current_user=Depends(get_optional_auth),
):
    decision = evaluate_path(current_user, path)
    return ok(decision.model_dump())
