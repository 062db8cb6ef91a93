"""
Payment request schemas
"""
from typing import Optional

from pydantic import BaseModel, Field, model_validator

MAX_ORDER_AMOUNT = 1_000_000


class CreatePaymentOrderRequest(BaseModel):
    """
    Create a gateway order

    With `order_id` the amount is taken from the local order; otherwise an
    explicit `amount` (rupees) is charged.
    """

    order_id: Optional[int] = None
    amount: Optional[float] = Field(None, ge=1, le=MAX_ORDER_AMOUNT)
    currency: str = Field("INR", min_length=3, max_length=3)
    receipt: Optional[str] = Field(None, max_length=40)
    notes: Optional[dict] = None

    @model_validator(mode="after")
    def check_amount_source(self):
        if self.order_id is None and self.amount is None:
            raise ValueError("Amount is required")
        return self


class VerifyPaymentRequest(BaseModel):
    order_id: str = Field(..., min_length=1, description="Gateway order id")
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
