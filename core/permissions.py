# core/permissions.py

"""
Permission fetching for a (user, company) pair.

Every lookup is fail-closed: a missing user/company or a failed RPC yields an
empty result and is logged, never raised. ``PermissionFetcher`` adds async
de-duplication and cancellation on top of a pluggable source so that the
same pipeline serves both the API and the Python client.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from core.cache import cache_get, cache_set, invalidate_user, make_key
from core.config import settings
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.access import AccessSnapshot, Permission


# ============================================================
# Synchronous RPC helpers (server side)
# ============================================================

def _rpc_rows(name: str, params: dict) -> Optional[list]:
    client = get_supabase_client()
    if not client:
        logger.error(f"Supabase unavailable for RPC {name}")
        return None

    try:
        result = client.rpc(name, params).execute()
    except Exception as e:
        logger.error(f"Error calling {name}: {e}")
        return None

    return result.data or []


def get_user_permissions(user_id: Optional[str], company_id: Optional[str]) -> List[Permission]:
    if not user_id or not company_id:
        return []

    key = make_key("permissions", user_id, company_id)
    cached = cache_get(key)
    if cached is not None:
        return cached

    rows = _rpc_rows("get_user_permissions", {"p_user_id": user_id, "p_company_id": company_id})
    if rows is None:
        return []

    permissions = [
        Permission(
            permission_code=row["permission_code"],
            module=row.get("module", ""),
            action=row.get("action", ""),
        )
        for row in rows
        if row.get("permission_code")
    ]
    cache_set(key, permissions, settings.PERMISSION_CACHE_TTL_SECONDS)
    return permissions


def get_user_accessible_modules(user_id: Optional[str], company_id: Optional[str]) -> List[str]:
    if not user_id or not company_id:
        return []

    key = make_key("modules", user_id, company_id)
    cached = cache_get(key)
    if cached is not None:
        return cached

    rows = _rpc_rows("get_user_accessible_modules", {"p_user_id": user_id, "p_company_id": company_id})
    if rows is None:
        return []

    modules = [row["module_code"] for row in rows if row.get("module_code")]
    cache_set(key, modules, settings.PERMISSION_CACHE_TTL_SECONDS)
    return modules


def get_company_modules(company_id: Optional[str]) -> List[str]:
    """Module codes enabled for the company."""
    if not company_id:
        return []

    rows = _rpc_rows("get_company_modules", {"p_company_id": company_id})
    if rows is None:
        return []

    return [
        row["module_code"]
        for row in rows
        if row.get("module_code") and row.get("is_enabled", True) is not False
    ]


def can_access(permissions: Iterable[Permission], permission_code: str) -> bool:
    return any(p.permission_code == permission_code for p in permissions or [])


def invalidate_permissions(user_id: str) -> int:
    return invalidate_user(user_id, namespaces=("permissions", "modules"))


# ============================================================
# Async fetcher
# ============================================================

class PermissionSource(Protocol):
    async def user_permissions(self, user_id: str, company_id: str) -> List[Permission]: ...

    async def accessible_modules(self, user_id: str, company_id: str) -> List[str]: ...

    async def company_modules(self, company_id: str) -> List[str]: ...


class SupabasePermissionSource:
    """Runs the blocking Supabase RPC helpers in a worker thread."""

    async def user_permissions(self, user_id: str, company_id: str) -> List[Permission]:
        return await asyncio.to_thread(get_user_permissions, user_id, company_id)

    async def accessible_modules(self, user_id: str, company_id: str) -> List[str]:
        return await asyncio.to_thread(get_user_accessible_modules, user_id, company_id)

    async def company_modules(self, company_id: str) -> List[str]:
        return await asyncio.to_thread(get_company_modules, company_id)


FetchKey = Tuple[str, str]


class PermissionFetcher:
    """
    Loads permissions then accessible modules for a (user, company) pair.

    Concurrent ``load`` calls for the same key share a single task. Loads for
    different keys run independently; ``cancel`` stops one explicitly.
    """

    def __init__(self, source: Optional[PermissionSource] = None):
        self.source = source or SupabasePermissionSource()
        self._inflight: Dict[FetchKey, asyncio.Task] = {}

    # ---------------------------------------------------------
    # Single lookups (fail-closed)
    # ---------------------------------------------------------
    async def fetch_permissions(self, user_id: Optional[str], company_id: Optional[str]) -> List[Permission]:
        if not user_id or not company_id:
            logger.warning("No user or company available for permissions check")
            return []
        try:
            return list(await self.source.user_permissions(user_id, company_id))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error fetching permissions for {user_id}: {e}")
            return []

    async def fetch_accessible_modules(self, user_id: Optional[str], company_id: Optional[str]) -> List[str]:
        if not user_id or not company_id:
            logger.warning("No user or company available for modules check")
            return []
        try:
            return list(await self.source.accessible_modules(user_id, company_id))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error fetching accessible modules for {user_id}: {e}")
            return []

    async def fetch_company_modules(self, company_id: Optional[str]) -> List[str]:
        if not company_id:
            logger.warning("No company available for company modules check")
            return []
        try:
            return list(await self.source.company_modules(company_id))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error fetching company modules for {company_id}: {e}")
            return []

    # ---------------------------------------------------------
    # Combined load with de-duplication
    # ---------------------------------------------------------
    async def _load(self, user_id: Optional[str], company_id: Optional[str]) -> AccessSnapshot:
        permissions = await self.fetch_permissions(user_id, company_id)
        modules = await self.fetch_accessible_modules(user_id, company_id)
        return AccessSnapshot(
            user_id=user_id,
            company_id=company_id,
            permissions=permissions,
            modules=modules,
            loading=False,
        )

    async def load(self, user_id: Optional[str], company_id: Optional[str]) -> AccessSnapshot:
        if not user_id or not company_id:
            return AccessSnapshot(user_id=user_id, company_id=company_id, loading=False)

        key = (user_id, company_id)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(user_id, company_id))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))

        # shield: one waiter being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    def _forget(self, key: FetchKey, task: asyncio.Task):
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def is_loading(self, user_id: str, company_id: str) -> bool:
        task = self._inflight.get((user_id, company_id))
        return task is not None and not task.done()

    def cancel(self, user_id: str, company_id: str) -> bool:
        task = self._inflight.pop((user_id, company_id), None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info(f"Permission load cancelled for user {user_id} in company {company_id}")
        return True

    def cancel_all(self):
        for user_id, company_id in list(self._inflight):
            self.cancel(user_id, company_id)

    def invalidate(self, user_id: str) -> int:
        return invalidate_permissions(user_id)
