# routers/cart.py

from fastapi import APIRouter, Depends

from core.errors import ApiError, AuthorizationError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok
from dependencies.auth import CurrentUser, get_current_user
from models.cart import CartItemAdd, CartItemUpdate


router = APIRouter(
    prefix="/cart",
    tags=["Cart"],
)

CART_ITEM_SELECT = (
    "id, quantity, products (id, name, description, price, sale_price, unit, "
    "unit_type, image_url, category_id, is_active, is_featured)"
)


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def get_or_create_cart(client, user_id: str, company_id: str) -> str:
    """One cart per (user, company); created on first use."""
    try:
        existing = (
            client.table("carts")
            .select("id")
            .eq("user_id", user_id)
            .eq("company_id", company_id)
            .limit(1)
            .execute()
        )
        if existing.data:
            return existing.data[0]["id"]

        created = client.table("carts").insert({"user_id": user_id, "company_id": company_id}).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to get cart")

    if not created.data:
        raise ApiError(500, "Failed to create cart")
    return created.data[0]["id"]


def _owned_cart_item(client, item_id: str, current_user: CurrentUser, action: str) -> dict:
    result = (
        client.table("cart_items")
        .select("id, cart_id")
        .eq("id", item_id)
        .eq("company_id", current_user.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Cart item not found")
    item = result.data[0]

    cart = (
        client.table("carts")
        .select("id")
        .eq("id", item["cart_id"])
        .eq("user_id", current_user.id)
        .eq("company_id", current_user.company_id)
        .limit(1)
        .execute()
    )
    if not cart.data:
        raise AuthorizationError(f"Not authorized to {action} this cart item")
    return item


# ============================================================
# GET CART
# ============================================================
@router.get("/", summary="Items in the current user's cart")
def get_cart(current_user: CurrentUser = Depends(get_current_user)):
    client = _client()
    cart_id = get_or_create_cart(client, current_user.id, current_user.company_id)

    try:
        result = (
            client.table("cart_items")
            .select(CART_ITEM_SELECT)
            .eq("cart_id", cart_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to get cart")

    return ok(result.data or [])


# ============================================================
# ADD ITEM (merges into an existing line for the same product)
# ============================================================
@router.post("/", summary="Add a product to the cart")
def add_to_cart(payload: CartItemAdd, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()
    company_id = current_user.company_id
    cart_id = get_or_create_cart(client, current_user.id, company_id)

    product = (
        client.table("products")
        .select("id, is_active")
        .eq("id", payload.product_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )
    if not product.data:
        raise NotFoundError("Product not found")
    if not product.data[0].get("is_active"):
        raise ValidationError("Product is not active")

    existing = (
        client.table("cart_items")
        .select("id, quantity")
        .eq("cart_id", cart_id)
        .eq("product_id", payload.product_id)
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )

    try:
        if existing.data:
            line = existing.data[0]
            (
                client.table("cart_items")
                .update({"quantity": (line.get("quantity") or 0) + payload.quantity})
                .eq("id", line["id"])
                .eq("company_id", company_id)
                .execute()
            )
        else:
            client.table("cart_items").insert({
                "cart_id": cart_id,
                "product_id": payload.product_id,
                "quantity": payload.quantity,
                "company_id": company_id,
            }).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to add item to cart")

    return ok(message="Item added to cart")


# ============================================================
# UPDATE QUANTITY
# ============================================================
@router.put("/{item_id}", summary="Change a cart line's quantity")
def update_cart_item(
    item_id: str,
    payload: CartItemUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = _client()
    _owned_cart_item(client, item_id, current_user, "update")

    try:
        (
            client.table("cart_items")
            .update({"quantity": payload.quantity})
            .eq("id", item_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update cart item")

    return ok(message="Cart item updated")


# ============================================================
# REMOVE ITEM
# ============================================================
@router.delete("/{item_id}", summary="Remove a line from the cart")
def remove_from_cart(item_id: str, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()
    _owned_cart_item(client, item_id, current_user, "remove")

    try:
        (
            client.table("cart_items")
            .delete()
            .eq("id", item_id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to remove item from cart")

    return ok(message="Item removed from cart")


# ============================================================
# CLEAR
# ============================================================
@router.delete("/", summary="Empty the cart")
def clear_cart(current_user: CurrentUser = Depends(get_current_user)):
    try:
        (
            _client().table("carts")
            .delete()
            .eq("user_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to clear cart")

    logger.info(f"Cart cleared for user {current_user.id}")
    return ok(message="Cart cleared")
