# core/tenant.py

"""
Tenant (company) resolution.

Server side: derive a company slug from request headers and look the company
up in Supabase. Client side: derive a candidate slug from the browser-style
location and resolve it to a company id through the API, caching the result
in an explicit ``TenantContext``.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional
from urllib.parse import urlparse

from core.config import settings
from core.errors import ApiError, NotFoundError, ValidationError
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.company import CompanyContext


# ============================================================
# Server side: host / header parsing
# ============================================================

def extract_subdomain(host: Optional[str]) -> Optional[str]:
    """
    "gulffresh.gofreshco.com:443" → "gulffresh"
    "gofreshco.com" / "www.gofreshco.com" / "localhost" → default slug
    Hosts outside the base domain → None
    """
    if not host:
        return None

    clean_host = host.split(":")[0].lower()
    base_domain = settings.TENANT_BASE_DOMAIN.lower()

    if clean_host == "localhost" or clean_host.endswith(".localhost"):
        return settings.DEFAULT_COMPANY_SLUG

    if not clean_host.endswith(base_domain):
        return None

    remainder = clean_host[: -len(base_domain)].rstrip(".")
    if not remainder or remainder == "www":
        return settings.DEFAULT_COMPANY_SLUG

    return remainder.split(".")[0] or None


def _subdomain_from_origin(origin: Optional[str]) -> Optional[str]:
    if not origin:
        return None

    try:
        hostname = urlparse(origin).hostname
    except ValueError as e:
        logger.warning(f"[Tenant] Failed to parse origin: {origin} ({e})")
        return None

    if not hostname or "." not in hostname or hostname.startswith("localhost"):
        return None

    parts = hostname.split(".")
    if len(parts) > 2:
        return parts[0].lower()
    return None


def resolve_request_subdomain(headers: Mapping[str, str]) -> str:
    """
    Pick the tenant slug for an incoming request.

    Priority:
        1. X-Tenant-Subdomain header
        2. Origin / Referer hostname (cross-origin frontends)
        3. Host header

    Raises:
        ValidationError: no usable source, or host outside the tenant domain
    """
    header_slug = headers.get("x-tenant-subdomain")
    if header_slug and header_slug.strip():
        return header_slug.strip().lower()

    origin_slug = _subdomain_from_origin(headers.get("origin") or headers.get("referer"))
    if origin_slug:
        return origin_slug

    host = headers.get("host")
    if not host:
        logger.error("[Tenant] Missing host, origin and X-Tenant-Subdomain headers")
        raise ValidationError("Missing host header or tenant subdomain")

    slug = extract_subdomain(host)
    if not slug:
        logger.error(f"[Tenant] Invalid tenant host: {host}")
        raise ValidationError("Invalid tenant host")

    return slug


# ============================================================
# Server side: company lookup
# ============================================================

def get_company_by_slug(slug: str) -> Optional[dict]:
    """Return the companies row for ``slug`` (any activity state), or None."""
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    result = (
        client.table("companies")
        .select("id, name, slug, is_active, created_at")
        .eq("slug", slug)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None


def resolve_company(headers: Mapping[str, str]) -> CompanyContext:
    slug = resolve_request_subdomain(headers)

    try:
        company = get_company_by_slug(slug)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"[Tenant] Company lookup failed for {slug}: {e}")
        company = None

    if not company or not company.get("is_active"):
        logger.error(f"[Tenant] Company not found for subdomain: {slug}")
        raise NotFoundError(f"Company not found for subdomain: {slug}")

    return CompanyContext(company_id=company["id"], company_slug=company["slug"])


# ============================================================
# Client side: candidate subdomain from a browser location
# ============================================================

LOCAL_HOSTS = ("localhost", "127.0.0.1")


def candidate_subdomain(
    hostname: str,
    query_params: Optional[Mapping[str, str]] = None,
    hash_params: Optional[Mapping[str, str]] = None,
    stored_subdomain: Optional[str] = None,
) -> Optional[str]:
    if stored_subdomain:
        return stored_subdomain

    hostname = (hostname or "").lower()

    if "." in hostname and not hostname.startswith("127.0.0.1"):
        parts = hostname.split(".")
        is_localhost_domain = len(parts) == 2 and parts[1] == "localhost"
        has_subdomain = len(parts) > 2 or is_localhost_domain
        is_root_domain = len(parts) == 2 and not is_localhost_domain

        if is_root_domain or parts[0] == "www":
            return "default"
        if has_subdomain:
            return parts[0]

    if hostname in LOCAL_HOSTS:
        tenant = (query_params or {}).get("tenant") or (hash_params or {}).get("tenant")
        return tenant or "default"

    return None


# ============================================================
# Client side: explicit context (replaces browser storage)
# ============================================================

@dataclass
class TenantContext:
    hostname: str = "localhost"
    company_id: Optional[str] = None
    tenant_subdomain: Optional[str] = None
    token: Optional[str] = None

    def invalidate(self):
        """Forget everything tied to the signed-in session."""
        self.company_id = None
        self.tenant_subdomain = None
        self.token = None


CompanyLookup = Callable[[str], Awaitable[Optional[dict]]]


class TenantResolver:
    """
    Resolves the current company id for a client session.

    ``lookup`` is an async callable returning the ``GET /companies/by-slug``
    response body (``{"success": true, "data": {...}}``) for a slug.
    """

    def __init__(self, context: TenantContext, lookup: CompanyLookup):
        self.context = context
        self.lookup = lookup

    def candidate(
        self,
        query_params: Optional[Mapping[str, str]] = None,
        hash_params: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        return candidate_subdomain(
            self.context.hostname,
            query_params,
            hash_params,
            self.context.tenant_subdomain,
        )

    async def resolve(
        self,
        query_params: Optional[Mapping[str, str]] = None,
        hash_params: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        if self.context.company_id:
            return self.context.company_id

        slug = self.candidate(query_params, hash_params)
        if not slug:
            return None

        try:
            body = await self.lookup(slug)
        except Exception as e:
            logger.error(f"[Tenant] Error resolving company for {slug}: {e}")
            return None

        if not body or not body.get("success"):
            logger.warning(f"[Tenant] Company lookup failed for {slug}")
            return None

        company_id = (body.get("data") or {}).get("id")
        if company_id:
            self.context.company_id = company_id
        return company_id
