# models/order.py

from typing import List, Optional
from pydantic import BaseModel, Field

from models.enums import OrderStatus


class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    variant_id: Optional[str] = None
    warehouse_id: Optional[str] = None


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_address_id: Optional[str] = None
    billing_address_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_intent_id: Optional[str] = None
    notes: Optional[str] = None
    # Sales executives may place orders on behalf of a customer
    customer_user_id: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[str] = None
    notes: Optional[str] = None
    # UI values: full_payment | partial_payment | full_credit (or a raw DB value)
    payment_status: Optional[str] = None


class OrderCancel(BaseModel):
    reason: Optional[str] = None


# UI payment labels → database payment_status
PAYMENT_STATUS_ALIASES = {
    "full_payment": "paid",
    "partial_payment": "partial",
    "full_credit": "credit",
}
