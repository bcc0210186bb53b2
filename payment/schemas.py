# src/payment/schemas.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List

from utils.pagination import PaginationMeta


class PaymentResponse(BaseModel):
    """Schema for payment response. Raw gateway data is never exposed."""
    id: int
    user_id: int
    plan_id: str
    amount: float
    currency: str
    status: str
    payment_method: str
    transaction_id: str
    duration_in_days: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginatedPaymentResponse(BaseModel):
    meta: PaginationMeta
    data: List[PaymentResponse]


class PaymentFilters(BaseModel):
    """Filters accepted by payment listings."""
    status: Optional[str] = None
    plan_id: Optional[str] = None
    user_id: Optional[int] = None
    search_term: Optional[str] = None
