# routers/companies.py

from fastapi import APIRouter, Depends

from core.config import settings
from core.errors import ApiError, NotFoundError, ValidationError, extract_supabase_error
from core.logging_config import logger
from core.rate_limiter import rate_limit_auth
from core.supabase_client import get_supabase_client
from core.tenant import get_company_by_slug
from core.utils import ok, slugify
from models.company import CompanyRegister


router = APIRouter(
    prefix="/companies",
    tags=["Companies"],
)


# ============================================================
# PUBLIC: resolve a tenant slug to its company
# ============================================================
@router.get("/by-slug/{slug}", summary="Look up an active company by subdomain slug")
def company_by_slug(slug: str):
    company = get_company_by_slug(slug.strip().lower())

    if not company or not company.get("is_active"):
        raise NotFoundError(f"Company not found for subdomain: {slug}")

    return ok({
        "id": company["id"],
        "name": company.get("name"),
        "slug": company["slug"],
    })


# ============================================================
# PUBLIC: register a company with its first admin
# ============================================================
def _email_registered(client, email: str) -> bool:
    try:
        users = client.auth.admin.list_users()
    except Exception as e:
        logger.error(f"Could not list auth users: {e}")
        raise ApiError(500, "Error registering company")

    email = email.lower()
    return any((getattr(u, "email", None) or "").lower() == email for u in users or [])


@router.post(
    "/register",
    status_code=201,
    dependencies=[Depends(rate_limit_auth)],
    summary="Register a new company and its admin user",
)
def register_company(payload: CompanyRegister):
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "SUPABASE_SERVICE_ROLE_KEY is required for company registration")

    if not payload.company_name or not payload.email or not payload.password:
        raise ValidationError("company_name, email, and password are required")

    slug = slugify(payload.company_slug or payload.company_name)
    if not slug:
        raise ValidationError("Unable to generate a valid company slug")

    # ---------------------------------------------------------
    # Uniqueness checks
    # ---------------------------------------------------------
    if get_company_by_slug(slug):
        raise ValidationError("Company slug already in use")

    if _email_registered(client, payload.email):
        raise ValidationError("Email already registered")

    # ---------------------------------------------------------
    # Create company
    # ---------------------------------------------------------
    try:
        result = client.table("companies").insert({"name": payload.company_name, "slug": slug}).execute()
    except Exception as e:
        logger.error(f"Error creating company: {extract_supabase_error(e)}")
        raise ApiError(500, "Failed to create company")

    if not result.data:
        raise ApiError(500, "Failed to create company")

    company = result.data[0]

    # ---------------------------------------------------------
    # Create admin user (rollback company on failure)
    # ---------------------------------------------------------
    user = None
    try:
        created = client.auth.admin.create_user({
            "email": payload.email,
            "password": payload.password,
            "email_confirm": True,
            "user_metadata": {
                "first_name": payload.first_name,
                "last_name": payload.last_name,
                "phone": payload.phone,
                "company_id": company["id"],
                "role": "admin",
            },
        })
        user = created.user if created else None
        failure = "Failed to create admin user"
    except Exception as e:
        failure = extract_supabase_error(e)

    if not user:
        logger.error(f"Error creating admin user for {slug}: {failure}")
        try:
            client.table("companies").delete().eq("id", company["id"]).execute()
        except Exception as e:
            logger.error(f"Rollback of company {company['id']} failed: {e}")
        raise ApiError(500, failure)

    # ---------------------------------------------------------
    # Profile (a database trigger usually creates it already)
    # ---------------------------------------------------------
    try:
        client.table("profiles").upsert({
            "id": user.id,
            "email": user.email,
            "first_name": payload.first_name,
            "last_name": payload.last_name,
            "phone": payload.phone,
            "company_id": company["id"],
            "role": "admin",
        }, on_conflict="id").execute()
    except Exception as e:
        logger.error(f"Error updating profile for {user.id}: {e}")

    try:
        client.table("company_memberships").upsert({
            "user_id": user.id,
            "company_id": company["id"],
            "is_active": True,
        }, on_conflict="user_id,company_id").execute()
    except Exception as e:
        logger.error(f"Error creating membership for {user.id}: {e}")

    logger.info(f"Company registered: {slug} ({company['id']}) with admin {payload.email}")

    return ok({
        "company": {"id": company["id"], "name": payload.company_name, "slug": slug},
        "admin": {"id": user.id, "email": payload.email, "role": "admin"},
        "login_url": f"https://{slug}.{settings.TENANT_BASE_DOMAIN}",
    })
