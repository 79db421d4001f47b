# models/payment.py

from typing import Optional
from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    amount: float = Field(..., gt=0, description="Amount in major currency units (e.g. dollars)")
    order_id: Optional[str] = None
    currency: str = "usd"


class PaymentIntentResponse(BaseModel):
    success: bool = True
    clientSecret: str
    paymentIntentId: str
