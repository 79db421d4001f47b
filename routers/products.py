# routers/products.py

from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.s3_client import upload_product_image
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize
from dependencies.auth import CurrentUser, admin_only
from dependencies.tenant import get_company_context
from models.catalog import ProductCreate, ProductUpdate
from models.company import CompanyContext


router = APIRouter(
    prefix="/products",
    tags=["Products"],
)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


# ============================================================
# LIST PRODUCTS
# ============================================================
@router.get("/", summary="List products")
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=200),
    company: CompanyContext = Depends(get_company_context),
):
    query = (
        _client().table("products")
        .select("*", count="exact")
        .eq("company_id", company.company_id)
    )

    if category:
        query = query.eq("category_id", category)
    if search:
        query = query.ilike("name", f"%{search}%")
    if min_price is not None:
        query = query.gte("price", min_price)
    if max_price is not None:
        query = query.lte("price", max_price)
    if in_stock:
        query = query.gt("stock_count", 0)

    if sort_by == "price_asc":
        query = query.order("price")
    elif sort_by == "price_desc":
        query = query.order("price", desc=True)
    else:
        query = query.order("created_at", desc=True)

    if limit:
        start = (page - 1) * limit
        query = query.range(start, start + limit - 1)

    try:
        result = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch products")

    return ok(result.data or [], count=result.count)


# ============================================================
# GET PRODUCT
# ============================================================
@router.get("/{product_id}", summary="Get product")
def get_product(product_id: str, company: CompanyContext = Depends(get_company_context)):
    result = (
        _client().table("products")
        .select("*, category:categories (id, name, slug)")
        .eq("id", product_id)
        .eq("company_id", company.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Product not found")

    return ok(result.data[0])


# ============================================================
# ADMIN WRITES
# ============================================================
@router.post("/", status_code=201, summary="Create product")
def create_product(payload: ProductCreate, current_user: CurrentUser = Depends(admin_only)):
    data = sanitize(payload.model_dump())
    data["company_id"] = current_user.company_id

    try:
        result = _client().table("products").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create product")

    return ok(result.data[0] if result.data else None)


@router.put("/{product_id}", summary="Update product")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    current_user: CurrentUser = Depends(admin_only),
):
    data = sanitize(payload.model_dump(exclude_unset=True))
    if not data:
        raise ValidationError("No fields to update")

    try:
        result = (
            _client().table("products")
            .update(data)
            .eq("id", product_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update product")

    if not result.data:
        raise NotFoundError("Product not found")

    return ok(result.data[0])


@router.delete("/{product_id}", summary="Delete product")
def delete_product(product_id: str, current_user: CurrentUser = Depends(admin_only)):
    try:
        result = (
            _client().table("products")
            .delete()
            .eq("id", product_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete product")

    if not result.data:
        raise NotFoundError("Product not found")

    return ok(message="Product deleted successfully")


# ============================================================
# IMAGE UPLOAD (R2)
# ============================================================
@router.post("/{product_id}/image", summary="Upload product image")
async def upload_image(
    product_id: str,
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(admin_only),
):
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Only JPEG, PNG, WebP or GIF images are allowed")

    content = await file.read()
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationError("Image must be 5MB or smaller")

    client = _client()
    existing = (
        client.table("products")
        .select("id")
        .eq("id", product_id)
        .eq("company_id", current_user.company_id)
        .limit(1)
        .execute()
    )
    if not existing.data:
        raise NotFoundError("Product not found")

    try:
        url = upload_product_image(current_user.company_id, product_id, file.filename, content, file.content_type)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Image upload failed for product {product_id}: {e}")
        raise ApiError(500, "Failed to upload image")

    client.table("products").update({"image_url": url}).eq("id", product_id).eq(
        "company_id", current_user.company_id
    ).execute()

    return ok({"image_url": url})
