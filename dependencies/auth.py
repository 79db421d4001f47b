from typing import Optional, List
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.errors import ApiError, AuthenticationError, AuthorizationError
from core.logging_config import logger
from core.permissions import can_access, get_user_permissions
from core.roles import get_user_roles, has_any_role
from core.supabase_client import get_supabase_client
from dependencies.tenant import get_company_context
from models.company import CompanyContext
from models.enums import Role


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity inside one company)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: str
    role: str                       # primary role (first of roles)
    roles: List[str] = []
    company_id: str
    company_slug: Optional[str] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return Role.admin.value in self.roles

    def has_any_role(self, required: List[str]) -> bool:
        return has_any_role(self.roles, required)


# ============================================================
# Membership lookup
# ============================================================
def get_user_membership(client: Client, user_id: str, company_id: str) -> Optional[dict]:
    try:
        result = (
            client.table("company_memberships")
            .select("company_id, is_active")
            .eq("user_id", user_id)
            .eq("company_id", company_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching membership for user {user_id}: {e}")
        return None

    rows = result.data or []
    return rows[0] if rows else None


# ============================================================
# AUTH DECODING (Supabase: validates JWT + membership + roles)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    company: CompanyContext = Depends(get_company_context),
) -> CurrentUser:

    if not credentials or not credentials.credentials:
        raise AuthenticationError("Authentication token is required")

    token = credentials.credentials

    client: Client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationError("Invalid authentication token")

    if not auth_resp or not auth_resp.user:
        raise AuthenticationError("Invalid authentication token")

    auth_user = auth_resp.user
    metadata = auth_user.user_metadata or {}

    # ---------------------------------------------------------
    # Company membership
    # ---------------------------------------------------------
    membership = get_user_membership(client, auth_user.id, company.company_id)
    if not membership:
        logger.warning(f"User {auth_user.id} is not a member of company {company.company_id}")
        raise AuthenticationError("User does not belong to this company")

    roles = get_user_roles(auth_user.id, company.company_id)

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email or "",
        role=roles[0] if roles else Role.user.value,
        roles=roles,
        company_id=company.company_id,
        company_slug=company.company_slug,
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
    )


# ============================================================
# ROLE CHECKER (admin override applies)
# ============================================================
def requires_role(allowed_roles: List[str], message: Optional[str] = None):
    def checker(current_user: CurrentUser = Depends(get_current_user)):
        if not current_user.has_any_role(allowed_roles):
            raise AuthorizationError(
                message or f"Access denied. Required roles: {', '.join(allowed_roles)}"
            )
        return current_user
    return checker


admin_only = requires_role([Role.admin.value, Role.accounts.value], "Admin or Accounts access required")
requires_accounts = requires_role([Role.accounts.value])
requires_sales = requires_role([Role.sales.value])
requires_warehouse_manager = requires_role([Role.warehouse_manager.value])


# ============================================================
# PERMISSION CHECK (permission codes from get_user_permissions)
# ============================================================
def requires_permission(permission: str):
    def checker(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.is_admin:
            return current_user

        permissions = get_user_permissions(current_user.id, current_user.company_id)
        if not can_access(permissions, permission):
            raise AuthorizationError(f"Missing permission: {permission}")
        return current_user
    return checker


# ============================================================
# OPTIONAL AUTHENTICATION (for hybrid endpoints)
# ============================================================
def get_optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    company: CompanyContext = Depends(get_company_context),
) -> Optional[CurrentUser]:
    """
    Returns CurrentUser if a valid token is provided, None otherwise.
    """
    if not credentials:
        return None

    try:
        return get_current_user(credentials, company)
    except HTTPException:
        return None
