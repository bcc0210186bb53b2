# src/payment/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from payment.services import PaymentLedger, PAYMENT_SORTABLE_FIELDS
from payment.schemas import PaginatedPaymentResponse, PaymentFilters
from auth.routes import get_current_user, check_admin_role
from auth.models import User
from database import get_db
from utils.pagination import PaginationOptions, pagination_params

router = APIRouter(prefix="/payments", tags=["payments"])
payment_pagination = pagination_params(PAYMENT_SORTABLE_FIELDS)


@router.get("/my-payments", response_model=PaginatedPaymentResponse)
def get_my_payments(
    status: Optional[str] = None,
    plan_id: Optional[str] = None,
    search_term: Optional[str] = None,
    options: PaginationOptions = Depends(payment_pagination),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The current user's payments."""
    filters = PaymentFilters(status=status, plan_id=plan_id, search_term=search_term)
    return PaymentLedger.list_for_user(current_user.id, filters, options, db)


@router.get("", response_model=PaginatedPaymentResponse, dependencies=[Depends(check_admin_role)])
def get_all_payments(
    status: Optional[str] = None,
    plan_id: Optional[str] = None,
    user_id: Optional[int] = None,
    search_term: Optional[str] = None,
    options: PaginationOptions = Depends(payment_pagination),
    db: Session = Depends(get_db),
):
    """All payments (admin)."""
    filters = PaymentFilters(status=status, plan_id=plan_id, user_id=user_id, search_term=search_term)
    return PaymentLedger.list_all(filters, options, db)
