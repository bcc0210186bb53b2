# src/admin/routes.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from auth.models import User, AdminActionLog
from auth.schemas import UserResponse, AdminActionLogResponse, PremiumStatusUpdate, UserUpdate
from auth.services import AuthService
from auth.routes import check_admin_role
from subscription.schemas import SweepResult, ReconcileResult
from subscription.services import SubscriptionService
from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def log_admin_action(admin_id: Optional[int], action: str, db: Session) -> None:
    db.add(AdminActionLog(admin_id=admin_id, action=action))
    db.commit()


@router.get("/users", response_model=List[UserResponse])
def get_users(
    is_premium: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role)
):
    """Retrieve users with optional premium filter."""
    query = db.query(User)
    if is_premium is not None:
        query = query.filter(User.is_premium.is_(is_premium))
    return query.order_by(User.id).all()


@router.get("/users/{user_id}", response_model=UserResponse, dependencies=[Depends(check_admin_role)])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return AuthService.get_user(user_id, db)


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role)
):
    """Rename, block/unblock or change the role of a user."""
    user = AuthService.update_user(user_id, data, db)
    changes = ", ".join(f"{field}={value}" for field, value in data.model_dump(exclude_unset=True).items())
    log_admin_action(current_user.id, f"Updated user {user_id}: {changes}", db)
    return user


@router.patch("/users/{user_id}/premium-status", response_model=UserResponse)
def update_premium_status(
    user_id: int,
    data: PremiumStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role)
):
    """Grant or revoke premium by hand."""
    user = SubscriptionService.set_premium_status(user_id, data.is_premium, db, data.subscription_duration)
    state = f"premium for {data.subscription_duration} days" if data.is_premium else "non-premium"
    log_admin_action(current_user.id, f"Set user {user_id} to {state}", db)
    return user


@router.post("/subscriptions/sweep", response_model=SweepResult)
def sweep_expired_subscriptions(
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role)
):
    """Revoke premium from users whose subscription has lapsed."""
    revoked = SubscriptionService.sweep_expired_subscriptions(db)
    log_admin_action(current_user.id, f"Ran expiry sweep, revoked {revoked}", db)
    return {"revoked_count": revoked}


@router.post("/subscriptions/reconcile", response_model=ReconcileResult)
def reconcile_entitlements(
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role)
):
    """Repair successful payments that never made their user premium."""
    result = SubscriptionService.reconcile_entitlements(db)
    log_admin_action(current_user.id, f"Ran reconciliation, repaired {result['repaired']} of {result['checked']}", db)
    return result


@router.get("/subscriptions/consistency", dependencies=[Depends(check_admin_role)])
def check_consistency(db: Session = Depends(get_db)):
    """500 with InconsistentState when any successful payment lacks its entitlement."""
    SubscriptionService.assert_consistent(db)
    return {"consistent": True}


@router.get("/logs", response_model=List[AdminActionLogResponse], dependencies=[Depends(check_admin_role)])
def get_admin_logs(db: Session = Depends(get_db)):
    """Retrieve admin action logs."""
    return db.query(AdminActionLog).order_by(AdminActionLog.timestamp.desc()).all()
