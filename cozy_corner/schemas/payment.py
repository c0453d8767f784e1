"""
Payment schemas.
"""
from typing import Optional

from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    order_id: int


class PaymentIntentOut(BaseModel):
    client_secret: str
    payment_intent_id: str
    amount: int


class PaymentVerifyOut(BaseModel):
    status: str


class RefundRequest(BaseModel):
    # None refunds the full amount
    amount: Optional[float] = Field(None, gt=0)


class RefundOut(BaseModel):
    message: str
    order_id: int
    refund_id: str
    amount: float
