# routers/customer.py

from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, handle_supabase_error
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, get_current_user


router = APIRouter(
    prefix="/customer",
    tags=["Customer"],
)


@router.get("/me", summary="Customer record of the current user")
def get_customer_details(current_user: CurrentUser = Depends(get_current_user)):
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")

    try:
        result = (
            client.table("customers")
            .select("*, credit_periods (id, amount, period, start_date, end_date, type, description, created_at)")
            .eq("user_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error fetching customer details")

    if not result.data:
        raise NotFoundError("Customer profile not found")

    return ok(result.data[0])
