# core/roles.py

from typing import Iterable, List, Optional

from core.cache import cache_get, cache_set, invalidate_user, make_key
from core.config import settings
from core.errors import ApiError, ValidationError
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.enums import Role


# ============================================
# ROLE LOOKUP (cached per user + company)
# ============================================

DEFAULT_ROLES = [Role.user.value]


def get_user_roles(user_id: str, company_id: Optional[str]) -> List[str]:
    """
    Roles held by ``user_id`` inside ``company_id``.
    Falls back to ``["user"]`` if the lookup fails.
    """
    key = make_key("roles", user_id, company_id)
    cached = cache_get(key)
    if cached is not None:
        return cached

    client = get_supabase_client()
    if not client:
        logger.error(f"Supabase unavailable; defaulting roles for user {user_id}")
        return list(DEFAULT_ROLES)

    try:
        result = client.rpc(
            "get_user_roles",
            {"p_user_id": user_id, "p_company_id": company_id},
        ).execute()
    except Exception as e:
        logger.error(f"Error fetching roles for user {user_id}: {e}")
        return list(DEFAULT_ROLES)

    roles = [r for r in (result.data or []) if r] or list(DEFAULT_ROLES)
    cache_set(key, roles, settings.ROLE_CACHE_TTL_SECONDS)
    return roles


# ============================================
# ROLE CHECKS (admin override everywhere)
# ============================================

def has_any_role(user_roles: Iterable[str], required: Iterable[str]) -> bool:
    required = list(required)
    if not required:
        return True

    held = set(user_roles or [])
    if Role.admin.value in held:
        return True

    return any(role in held for role in required)


# ============================================
# ROLE CATALOG + ASSIGNMENT
# ============================================

def get_all_roles() -> List[dict]:
    client = get_supabase_client()
    if not client:
        return []

    try:
        result = client.table("roles").select("*").order("name").execute()
        return result.data or []
    except Exception as e:
        logger.error(f"Error fetching all roles: {e}")
        return []


def invalidate_role_cache(user_id: str) -> int:
    return invalidate_user(user_id)


def assign_user_roles(user_id: str, company_id: str, role_names: List[str]) -> List[str]:
    """
    Replace every role ``user_id`` holds in ``company_id`` with ``role_names``.

    Raises:
        ValidationError: unknown role names
        ApiError: database failure
    """
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    role_names = list(dict.fromkeys(role_names))

    try:
        result = client.table("roles").select("id, name").in_("name", role_names).execute()
    except Exception as e:
        logger.error(f"Error validating roles: {e}")
        raise ApiError(500, "Failed to validate roles")

    role_ids = {r["name"]: r["id"] for r in (result.data or [])}
    invalid = [name for name in role_names if name not in role_ids]
    if invalid:
        raise ValidationError(f"Invalid roles: {', '.join(invalid)}")

    try:
        (
            client.table("user_roles")
            .delete()
            .eq("user_id", user_id)
            .eq("company_id", company_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error deleting existing roles: {e}")
        raise ApiError(500, "Failed to remove existing roles")

    if role_names:
        rows = [
            {"user_id": user_id, "company_id": company_id, "role_id": role_ids[name]}
            for name in role_names
        ]
        try:
            client.table("user_roles").insert(rows).execute()
        except Exception as e:
            logger.error(f"Error inserting new roles: {e}")
            raise ApiError(500, "Failed to assign roles")

    invalidate_role_cache(user_id)
    logger.info(f"Roles for user {user_id} in company {company_id} set to {role_names}")
    return role_names


# ============================================
# WAREHOUSE SCOPE
# ============================================

def get_user_warehouses(user_id: str, company_id: str) -> List[str]:
    client = get_supabase_client()
    if not client:
        return []

    try:
        result = (
            client.table("warehouse_managers")
            .select("warehouse_id")
            .eq("user_id", user_id)
            .eq("company_id", company_id)
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching warehouses for user {user_id}: {e}")
        return []

    return [row["warehouse_id"] for row in (result.data or [])]


def has_warehouse_access(user_id: str, company_id: str, warehouse_id: str) -> bool:
    client = get_supabase_client()
    if not client:
        return False

    try:
        result = client.rpc(
            "has_warehouse_access",
            {
                "p_user_id": user_id,
                "p_warehouse_id": warehouse_id,
                "p_company_id": company_id,
            },
        ).execute()
    except Exception as e:
        logger.error(f"Error checking warehouse access for user {user_id}: {e}")
        return False

    return result.data is True
