from fastapi import Request

from core.tenant import resolve_company
from models.company import CompanyContext


# ============================================================
# Tenant context (resolved per request from headers)
# ============================================================
def get_company_context(request: Request) -> CompanyContext:
    """
    Resolve the company for this request from X-Tenant-Subdomain,
    Origin/Referer, or Host. Raises 400/404 through ApiError.
    """
    context = resolve_company(request.headers)
    request.state.company_id = context.company_id
    request.state.company_slug = context.company_slug
    return context
