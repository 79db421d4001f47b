# client/session.py

from typing import List, Mapping, Optional

import httpx
from pydantic import BaseModel

from client.api import ApiClient, ApiClientError
from core.access_filter import filter_menu_items, filter_modules, filter_sidebar_groups
from core.logging_config import logger
from core.modules_config import all_modules
from core.permissions import PermissionFetcher
from core.route_guard import evaluate_path
from core.sidebar_config import all_groups
from core.tenant import TenantContext, TenantResolver
from models.access import AccessSnapshot, GuardDecision, ModuleConfig, Permission, SidebarGroup


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    roles: List[str] = []


class ApiPermissionSource:
    """PermissionSource backed by the /permissions endpoints (token identifies the user)."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def user_permissions(self, user_id: str, company_id: str) -> List[Permission]:
        rows = await self.api.get("/permissions/me")
        return [Permission(**row) for row in rows or []]

    async def accessible_modules(self, user_id: str, company_id: str) -> List[str]:
        return list(await self.api.get("/permissions/modules") or [])

    async def company_modules(self, company_id: str) -> List[str]:
        return list(await self.api.get("/permissions/company-modules") or [])


class ClientSession:
    """
    One signed-in frontend session: tenant, identity and access snapshot.

    Order of operations: ``start`` resolves the tenant, ``login`` authenticates
    inside it and loads permissions, ``logout`` clears all of it.
    """

    def __init__(
        self,
        base_url: str,
        hostname: str = "localhost",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.context = TenantContext(hostname=hostname)
        self.api = ApiClient(base_url, self.context, transport=transport)
        self.tenant = TenantResolver(self.context, self.api.company_by_slug)
        self.fetcher = PermissionFetcher(ApiPermissionSource(self.api))
        self.user: Optional[SessionUser] = None
        self.access = AccessSnapshot()
        self.company_modules: List[str] = []

    @property
    def loading(self) -> bool:
        if not self.user or not self.context.company_id:
            return False
        return self.fetcher.is_loading(self.user.id, self.context.company_id)

    # ---------------------------------------------------------
    # Tenant
    # ---------------------------------------------------------
    async def start(
        self,
        query_params: Optional[Mapping[str, str]] = None,
        hash_params: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        slug = self.tenant.candidate(query_params, hash_params)
        if slug:
            self.context.tenant_subdomain = slug
        return await self.tenant.resolve(query_params, hash_params)

    # ---------------------------------------------------------
    # Auth
    # ---------------------------------------------------------
    async def login(self, email: str, password: str) -> SessionUser:
        if not self.context.company_id:
            raise ApiClientError("Company context is required before login")

        tokens = await self.api.post("/auth/login", json={"email": email, "password": password})
        self.context.token = tokens["access_token"]

        me = await self.api.get("/auth/me")
        self.user = SessionUser(id=me["id"], email=me.get("email"), roles=me.get("roles") or [])
        logger.info(f"Signed in {self.user.id} to company {self.context.company_id}")

        await self.refresh_access()
        return self.user

    async def refresh_access(self) -> AccessSnapshot:
        user_id = self.user.id if self.user else None
        shared = await self.fetcher.load(user_id, self.context.company_id)
        # the loaded snapshot is shared with every concurrent waiter
        self.access = shared.model_copy(update={"roles": list(self.user.roles) if self.user else []})
        self.company_modules = await self.fetcher.fetch_company_modules(self.context.company_id)
        return self.access

    async def logout(self):
        if self.context.token:
            try:
                await self.api.post("/auth/logout")
            except ApiClientError as e:
                logger.warning(f"Logout request failed: {e.message}")

        self.fetcher.cancel_all()
        self.user = None
        self.access = AccessSnapshot()
        self.company_modules = []
        self.context.invalidate()

    async def close(self):
        self.fetcher.cancel_all()
        await self.api.close()

    # ---------------------------------------------------------
    # Navigation / guard (local filtering of the static trees)
    # ---------------------------------------------------------
    def sidebar(self) -> List[SidebarGroup]:
        return filter_sidebar_groups(all_groups(), self.access.roles)

    def modules(self) -> List[ModuleConfig]:
        return filter_modules(all_modules(), self.access.permission_codes, self.company_modules)

    def menu_items(self, items):
        return filter_menu_items(items, self.access.roles, self.access.permission_codes)

    def guard(self, path: str) -> GuardDecision:
        return evaluate_path(self.user, path, loading=self.loading)
