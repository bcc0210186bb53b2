# src/subscription/schemas.py
from pydantic import BaseModel
from typing import List

from payment.schemas import PaymentResponse


class SubscriptionInitiate(BaseModel):
    """Schema for starting a plan purchase."""
    plan_id: str


class PlanResponse(BaseModel):
    id: str
    name: str
    price: float
    currency_code: str
    duration_in_days: int
    features: List[str]

    class Config:
        from_attributes = True


class SubscriptionInitiateResponse(BaseModel):
    payment: PaymentResponse
    redirect_url: str


class SweepResult(BaseModel):
    revoked_count: int


class ReconcileResult(BaseModel):
    checked: int
    repaired: int
