# routers/payments.py

from typing import Optional
from fastapi import APIRouter, Depends, Header, Query, Request

from core.errors import ApiError, AuthorizationError, NotFoundError
from core.logging_config import logger
from core.stripe_helpers import construct_webhook_event, create_payment_intent
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser, get_current_user, get_optional_auth
from dependencies.tenant import get_company_context
from core.utils import ok
from models.company import CompanyContext
from models.payment import PaymentIntentCreate, PaymentIntentResponse


router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)

PENDING_ORDER = "pending_order"


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


# ============================================================
# CREATE PAYMENT INTENT
# ============================================================
@router.post("/create-payment-intent", response_model=PaymentIntentResponse, summary="Create a Stripe PaymentIntent")
def create_intent(
    payload: PaymentIntentCreate,
    company: CompanyContext = Depends(get_company_context),
    current_user: Optional[CurrentUser] = Depends(get_optional_auth),
):
    user_id = current_user.id if current_user else "anonymous"
    intent = create_payment_intent(payload.amount, user_id, payload.order_id, payload.currency)

    if payload.order_id and current_user:
        try:
            (
                _client().table("orders")
                .update({"payment_intent_id": intent.id})
                .eq("id", payload.order_id)
                .eq("user_id", current_user.id)
                .eq("company_id", company.company_id)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not update order {payload.order_id} with payment intent: {e}")

    return PaymentIntentResponse(clientSecret=intent.client_secret, paymentIntentId=intent.id)


# ============================================================
# STRIPE WEBHOOK (no tenant header; company comes from the order)
# ============================================================
def _order_company(client, order_id: Optional[str]) -> Optional[str]:
    if not order_id or order_id == PENDING_ORDER:
        return None
    result = client.table("orders").select("company_id").eq("id", order_id).limit(1).execute()
    return result.data[0]["company_id"] if result.data else None


def handle_payment_succeeded(intent: dict):
    metadata = intent.get("metadata") or {}
    order_id = metadata.get("order_id")
    client = _client()

    company_id = _order_company(client, order_id)
    if not company_id:
        logger.warning(f"Skipping payment success for {intent.get('id')}: no company for order {order_id}")
        return

    existing = (
        client.table("payments")
        .select("id, order_id")
        .eq("stripe_payment_intent_id", intent["id"])
        .eq("company_id", company_id)
        .limit(1)
        .execute()
    )

    if not existing.data:
        methods = intent.get("payment_method_types") or ["card"]
        client.table("payments").insert({
            "order_id": order_id,
            "amount": (intent.get("amount") or 0) / 100,
            "status": "completed",
            "payment_method": methods[0],
            "stripe_payment_intent_id": intent["id"],
            "company_id": company_id,
        }).execute()
    elif not existing.data[0].get("order_id"):
        client.table("payments").update({"order_id": order_id}).eq("id", existing.data[0]["id"]).eq(
            "company_id", company_id
        ).execute()

    client.table("orders").update({
        "payment_status": "paid",
        "payment_intent_id": intent["id"],
    }).eq("id", order_id).eq("company_id", company_id).execute()

    logger.info(f"Payment {intent['id']} recorded for order {order_id}")


def handle_payment_failed(intent: dict):
    metadata = intent.get("metadata") or {}
    order_id = metadata.get("order_id")
    client = _client()

    company_id = _order_company(client, order_id)
    if not company_id:
        return

    client.table("orders").update({"payment_status": "failed"}).eq("id", order_id).eq(
        "company_id", company_id
    ).execute()
    logger.warning(f"Payment {intent.get('id')} failed for order {order_id}")


@router.post("/webhook", summary="Stripe webhook receiver")
async def stripe_webhook(request: Request, stripe_signature: Optional[str] = Header(None)):
    payload = await request.body()
    event = construct_webhook_event(payload, stripe_signature)

    event_type = event["type"]
    intent = event["data"]["object"]

    if event_type == "payment_intent.succeeded":
        handle_payment_succeeded(intent)
    elif event_type == "payment_intent.payment_failed":
        handle_payment_failed(intent)
    else:
        logger.info(f"Unhandled Stripe event: {event_type}")

    return {"received": True}


# ============================================================
# PAYMENT HISTORY (current user)
# ============================================================
@router.get("/history", summary="Payments for the current user's orders")
def payment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
):
    client = _client()

    orders = (
        client.table("orders")
        .select("id")
        .eq("user_id", current_user.id)
        .eq("company_id", current_user.company_id)
        .execute()
    )
    order_ids = [o["id"] for o in orders.data or []]
    if not order_ids:
        return ok([], count=0, page=page, limit=limit)

    result = (
        client.table("payments")
        .select("*", count="exact")
        .in_("order_id", order_ids)
        .eq("company_id", current_user.company_id)
        .order("created_at", desc=True)
        .range((page - 1) * limit, page * limit - 1)
        .execute()
    )
    return ok(result.data or [], count=result.count or 0, page=page, limit=limit)


# ============================================================
# GET PAYMENT
# ============================================================
@router.get("/{payment_id}", summary="Get a payment")
def get_payment(payment_id: str, current_user: CurrentUser = Depends(get_current_user)):
    client = _client()

    result = (
        client.table("payments")
        .select("*")
        .eq("id", payment_id)
        .eq("company_id", current_user.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Payment not found")
    payment = result.data[0]

    if payment.get("order_id") and not current_user.has_any_role(["accounts"]):
        order = (
            client.table("orders")
            .select("user_id")
            .eq("id", payment["order_id"])
            .eq("company_id", current_user.company_id)
            .limit(1)
            .execute()
        )
        if not order.data or order.data[0].get("user_id") != current_user.id:
            raise AuthorizationError("Not authorized to view this payment")

    return ok(payment)
