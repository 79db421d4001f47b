# routers/categories.py

from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, handle_supabase_error
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize, slugify
from dependencies.auth import CurrentUser, admin_only
from dependencies.tenant import get_company_context
from models.catalog import CategoryCreate, CategoryUpdate
from models.company import CompanyContext


router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


# ============================================================
# PUBLIC READS (tenant scoped)
# ============================================================
@router.get("/", summary="List categories")
def list_categories(company: CompanyContext = Depends(get_company_context)):
    try:
        result = (
            _client().table("categories")
            .select("*")
            .eq("company_id", company.company_id)
            .order("name")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch categories")

    return ok(result.data or [])


@router.get("/{category_id}", summary="Get a category with its products")
def get_category(category_id: str, company: CompanyContext = Depends(get_company_context)):
    result = (
        _client().table("categories")
        .select("*, products(*)")
        .eq("id", category_id)
        .eq("company_id", company.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Category not found")

    return ok(result.data[0])


# ============================================================
# ADMIN WRITES
# ============================================================
@router.post("/", status_code=201, summary="Create category")
def create_category(payload: CategoryCreate, current_user: CurrentUser = Depends(admin_only)):
    data = sanitize(payload.model_dump())
    data["slug"] = slugify(data.get("slug") or data["name"])
    data["company_id"] = current_user.company_id

    try:
        result = _client().table("categories").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create category")

    return ok(result.data[0] if result.data else None)


@router.put("/{category_id}", summary="Update category")
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    current_user: CurrentUser = Depends(admin_only),
):
    data = sanitize(payload.model_dump(exclude_unset=True))
    if data.get("slug"):
        data["slug"] = slugify(data["slug"])

    try:
        result = (
            _client().table("categories")
            .update(data)
            .eq("id", category_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update category")

    if not result.data:
        raise NotFoundError("Category not found")

    return ok(result.data[0])


@router.delete("/{category_id}", summary="Delete category")
def delete_category(category_id: str, current_user: CurrentUser = Depends(admin_only)):
    try:
        result = (
            _client().table("categories")
            .delete()
            .eq("id", category_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete category")

    if not result.data:
        raise NotFoundError("Category not found")

    return ok(message="Category deleted successfully")
