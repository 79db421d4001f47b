# core/stripe_helpers.py

from typing import Optional

import stripe

from core.config import settings
from core.errors import ApiError, UpstreamError, ValidationError
from core.logging_config import logger


def get_stripe_client():
    """Configured Stripe module."""
    if not settings.STRIPE_SECRET_KEY:
        raise ApiError(500, "Stripe secret key not configured")

    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe


def to_minor_units(amount: float) -> int:
    """Dollars → cents, rounded to the nearest cent."""
    return int(round(float(amount) * 100))


def create_payment_intent(
    amount: float,
    user_id: str,
    order_id: Optional[str] = None,
    currency: str = "usd",
):
    """
    Create a PaymentIntent with automatic payment methods.

    Raises:
        ValidationError: non-positive amount
        UpstreamError: Stripe rejected the request
    """
    if amount is None or amount <= 0:
        raise ValidationError("Valid amount is required")

    client = get_stripe_client()

    try:
        intent = client.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency,
            automatic_payment_methods={"enabled": True},
            metadata={
                "user_id": user_id,
                "order_id": order_id or "pending_order",
                "source": "web_checkout",
            },
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error creating payment intent for user {user_id}: {e}")
        raise UpstreamError("Error creating payment intent")

    logger.info(f"Payment intent {intent.id} created for user {user_id} ({amount} {currency})")
    return intent


def construct_webhook_event(payload: bytes, signature: Optional[str]):
    """
    Verify a webhook payload against STRIPE_WEBHOOK_SECRET.

    Raises:
        ValidationError: missing/invalid signature or payload
    """
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise ApiError(500, "Stripe webhook secret not configured")

    if not signature:
        raise ValidationError("Missing Stripe signature")

    try:
        return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError:
        logger.warning("Stripe webhook with invalid payload")
        raise ValidationError("Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Stripe webhook with invalid signature")
        raise ValidationError("Invalid signature")
