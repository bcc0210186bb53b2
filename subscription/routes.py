# src/subscription/routes.py
import logging

from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List
from subscription.services import SubscriptionService
from subscription.schemas import PlanResponse, SubscriptionInitiate, SubscriptionInitiateResponse
from subscription.plans import get_plans, get_plan_by_id
from payment.models import PaymentStatus
from payment.schemas import PaymentResponse
from auth.routes import get_current_user
from auth.models import User
from config import settings
from database import get_db
from errors import AppError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["subscription"])


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService()


def _frontend_redirect(outcome: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.FRONTEND_URL.rstrip('/')}/subscription/{outcome}", status_code=302)


@router.get("/plans", response_model=List[PlanResponse])
def list_plans():
    """All subscription plans."""
    return get_plans()


@router.get("/plans/{plan_id}", response_model=PlanResponse)
def get_plan(plan_id: str):
    return get_plan_by_id(plan_id)


@router.post("/initiate", response_model=SubscriptionInitiateResponse)
def initiate_subscription(
    data: SubscriptionInitiate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Start a plan purchase and return the gateway checkout URL."""
    payment, redirect_url = service.initiate(current_user.id, data.plan_id, db)
    return {"payment": payment, "redirect_url": redirect_url}


@router.get("/payment-callback")
def payment_success_callback(
    tran_id: str,
    val_id: str,
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Browser redirect from the gateway after checkout."""
    try:
        payment = service.verify(tran_id, val_id, db)
    except AppError as e:
        logger.error(f"Verification on redirect failed for {tran_id}: {e.detail} ({e.context})")
        return _frontend_redirect("failed")
    return _frontend_redirect("success" if payment.status == PaymentStatus.SUCCESS else "failed")


@router.post("/ipn", response_model=PaymentResponse)
def payment_ipn(
    tran_id: str = Form(...),
    val_id: str = Form(...),
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Out-of-band notification from the gateway. Redelivery is harmless."""
    return service.verify(tran_id, val_id, db)


def _close_and_redirect(tran_id: str, outcome: str, db: Session, service: SubscriptionService) -> RedirectResponse:
    try:
        if outcome == "cancelled":
            service.cancel(tran_id, db)
        else:
            service.fail(tran_id, db)
    except AppError as e:
        logger.warning(f"{outcome} callback for {tran_id} ignored: {e.detail}")
    return _frontend_redirect(outcome)


@router.get("/payment-failed")
def payment_failed_callback(
    tran_id: str,
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return _close_and_redirect(tran_id, "failed", db, service)


@router.post("/payment-failed")
def payment_failed_post(
    tran_id: str = Form(...),
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """The gateway posts the fail callback as a form."""
    return _close_and_redirect(tran_id, "failed", db, service)


@router.get("/payment-cancelled")
def payment_cancelled_callback(
    tran_id: str,
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return _close_and_redirect(tran_id, "cancelled", db, service)


@router.post("/payment-cancelled")
def payment_cancelled_post(
    tran_id: str = Form(...),
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return _close_and_redirect(tran_id, "cancelled", db, service)


@router.get("/history", response_model=List[PaymentResponse])
def get_subscription_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The current user's purchase attempts, newest first."""
    return SubscriptionService.get_user_subscription_history(current_user.id, db)
