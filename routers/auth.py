from fastapi import APIRouter, Depends

from core.cache import invalidate_user
from core.errors import ApiError, AuthenticationError
from core.logging_config import logger
from core.rate_limiter import rate_limit_auth
from core.roles import get_user_roles
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize
from dependencies.auth import CurrentUser, get_current_user, get_user_membership
from dependencies.tenant import get_company_context
from models.auth import LoginRequest, ProfileUpdate, TokenResponse
from models.company import CompanyContext


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# LOGIN (SUPABASE AUTH, scoped to the resolved company)
# ============================================================
@router.post(
    "/login",
    dependencies=[Depends(rate_limit_auth)],
    summary="Authenticate user within the current company",
)
def login(payload: LoginRequest, company: CompanyContext = Depends(get_company_context)):

    email = payload.email.strip().lower()

    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise AuthenticationError("Invalid email or password")

    if not response.session or not response.session.access_token:
        raise AuthenticationError("Invalid email or password")

    user_id = response.user.id
    if not get_user_membership(client, user_id, company.company_id):
        logger.warning(f"Login rejected: {email} is not a member of {company.company_slug}")
        raise AuthenticationError("User does not belong to this company")

    token = TokenResponse(
        access_token=response.session.access_token,
        refresh_token=response.session.refresh_token,
        expires_in=response.session.expires_in,
        company_id=company.company_id,
        roles=get_user_roles(user_id, company.company_id),
    )
    return ok(token.model_dump())


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="End the session and drop cached access data")
def logout(current_user: CurrentUser = Depends(get_current_user)):
    invalidate_user(current_user.id)
    logger.info(f"User {current_user.id} logged out of {current_user.company_slug}")
    return ok(message="Logged out successfully")


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return ok(current_user.model_dump())


@router.put("/profile", summary="Update current user profile")
def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Users can update their own name and phone.
    Roles and company membership are managed by admins.
    """
    updates = sanitize(payload.model_dump(exclude_unset=True))
    if not updates:
        return ok(current_user.model_dump())

    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    try:
        result = (
            client.table("profiles")
            .update(updates)
            .eq("id", current_user.id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Profile update failed for {current_user.id}: {e}")
        raise ApiError(500, "Failed to update profile")

    if not result.data:
        raise ApiError(404, "Profile not found")

    logger.info(f"User {current_user.id} updated their profile")
    return ok(result.data[0])
