# src/subscription/services.py
import logging
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case
from sqlalchemy.orm import Session

from auth.models import User, UserRole
from auth.services import AuthService
from config import settings
from errors import InconsistentState, InvalidTransition
from payment.gateway import CheckoutRequest, SSLCommerzGateway
from payment.models import Payment, PaymentStatus
from payment.services import PaymentLedger
from subscription.plans import SubscriptionPlan, get_plan_by_id
from utils.dates import utcnow

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Purchase -> verification -> entitlement state machine.

    A payment attempt is PENDING while the checkout session is being created
    and while we wait for the gateway to call back. It becomes SUCCESS only
    after the gateway's validation API confirms it, FAILED when validation
    rejects it or the session could not be created, and CANCELLED only via
    the explicit cancel callback.
    """

    def __init__(self, gateway: Optional[SSLCommerzGateway] = None):
        self.gateway = gateway or SSLCommerzGateway()

    @staticmethod
    def callback_urls() -> Dict[str, str]:
        base = settings.BACKEND_URL.rstrip("/")
        return {
            "success_url": f"{base}/subscription/payment-callback",
            "fail_url": f"{base}/subscription/payment-failed",
            "cancel_url": f"{base}/subscription/payment-cancelled",
            "ipn_url": f"{base}/subscription/ipn",
        }

    def initiate(self, user_id: int, plan_id: str, db: Session) -> Tuple[Payment, str]:
        """Create a PENDING payment and a hosted checkout session for it.

        Returns the payment and the URL the user has to be redirected to.
        """
        user = AuthService.get_user(user_id, db)
        plan: SubscriptionPlan = get_plan_by_id(plan_id)

        payment = PaymentLedger.create(
            user_id=user.id,
            plan_id=plan.id,
            amount=plan.price,
            currency=plan.currency_code,
            duration_in_days=plan.duration_in_days,
            db=db,
        )
        request = CheckoutRequest(
            transaction_id=payment.transaction_id,
            amount=plan.price,
            currency=plan.currency_code,
            product_name=f"{plan.name} Subscription",
            customer_name=user.name,
            customer_email=user.email,
            **self.callback_urls(),
        )

        try:
            session = self.gateway.create_session(request)
        except Exception:
            logger.error(f"Checkout session failed for payment {payment.transaction_id}, marking FAILED")
            db.rollback()
            PaymentLedger.mark_terminal(payment.transaction_id, PaymentStatus.FAILED, db)
            raise

        PaymentLedger.attach_gateway_session(payment.id, session.raw_payload, db)
        db.refresh(payment)
        return payment, session.redirect_url

    @staticmethod
    def _validation_matches(payment: Payment, payload: Dict[str, Any]) -> bool:
        """The validated transaction must be the one we issued, for the amount we charged."""
        tran_id = payload.get("tran_id")
        if tran_id is not None and tran_id != payment.transaction_id:
            logger.warning(f"Validation for {payment.transaction_id} returned tran_id {tran_id}")
            return False
        amount = payload.get("amount")
        if amount is not None:
            try:
                if Decimal(str(amount)) != Decimal(str(payment.amount)):
                    logger.warning(f"Validation for {payment.transaction_id} returned amount {amount}")
                    return False
            except InvalidOperation:
                return False
        return True

    def verify(self, transaction_id: str, validation_token: str, db: Session) -> Payment:
        """Settle a payment from a success redirect or an IPN.

        Safe to call any number of times and concurrently: whichever caller
        wins the PENDING -> terminal transition grants the entitlement, every
        other caller gets the already-settled payment back unchanged.
        GatewayError propagates and leaves the payment PENDING for a retry.
        """
        payment = PaymentLedger.find_by_transaction_id(transaction_id, db)
        if payment.is_terminal:
            logger.info(f"Payment {transaction_id} already {payment.status}, nothing to verify")
            return payment

        validation = self.gateway.validate_transaction(validation_token)
        valid = validation.valid and self._validation_matches(payment, validation.raw_payload)
        status = PaymentStatus.SUCCESS if valid else PaymentStatus.FAILED
        if not valid:
            logger.warning(
                f"Payment {transaction_id} rejected by validation: "
                f"status={validation.raw_payload.get('status')} val_id={validation_token}"
            )

        try:
            settled = PaymentLedger.mark_terminal(
                transaction_id, status, db, extra_data=validation.raw_payload, commit=False
            )
            if status == PaymentStatus.SUCCESS:
                self.grant_entitlement(settled, db)
            db.commit()
        except InvalidTransition:
            db.rollback()
            logger.info(f"Payment {transaction_id} was settled by a concurrent callback")
            return PaymentLedger.find_by_transaction_id(transaction_id, db)
        except Exception:
            db.rollback()
            raise

        db.refresh(settled)
        return settled

    def _close(self, transaction_id: str, status: str, db: Session) -> Payment:
        try:
            return PaymentLedger.mark_terminal(transaction_id, status, db)
        except InvalidTransition:
            db.rollback()
            return PaymentLedger.find_by_transaction_id(transaction_id, db)

    def cancel(self, transaction_id: str, db: Session) -> Payment:
        """Explicit cancel callback from the gateway."""
        return self._close(transaction_id, PaymentStatus.CANCELLED, db)

    def fail(self, transaction_id: str, db: Session) -> Payment:
        """Explicit fail callback from the gateway."""
        return self._close(transaction_id, PaymentStatus.FAILED, db)

    @staticmethod
    def grant_entitlement(payment: Payment, db: Session, expires_at: Optional[datetime] = None) -> bool:
        """Make the payment's user premium, within the caller's transaction.

        The payment is stamped with ``entitlement_granted_at`` by a conditional
        update first; if someone else already stamped it nothing is granted and
        False is returned. When ``expires_at`` is given, a later expiry the user
        already has is kept.
        """
        now = utcnow()
        stamped = (
            db.query(Payment)
            .filter(Payment.id == payment.id, Payment.entitlement_granted_at.is_(None))
            .update({Payment.entitlement_granted_at: now}, synchronize_session=False)
        )
        if stamped == 0:
            return False

        user = db.query(User).populate_existing().with_for_update().filter(User.id == payment.user_id).one()
        if expires_at is None:
            expiry = now + timedelta(days=payment.duration_in_days)
        elif user.is_premium and user.subscription_expiry_date and user.subscription_expiry_date > expires_at:
            expiry = user.subscription_expiry_date
        else:
            expiry = expires_at

        user.is_premium = True
        user.subscription_expiry_date = expiry
        if user.role != UserRole.ADMIN:
            user.role = UserRole.PREMIUM
        db.flush()
        logger.info(f"User {user.id} is premium until {expiry.isoformat()} (payment {payment.transaction_id})")
        return True

    @staticmethod
    def sweep_expired_subscriptions(db: Session) -> int:
        """Revoke premium from every user whose expiry date has passed."""
        revoked = (
            db.query(User)
            .filter(User.is_premium.is_(True), User.subscription_expiry_date < utcnow())
            .update(
                {
                    User.is_premium: False,
                    User.subscription_expiry_date: None,
                    User.role: case((User.role == UserRole.ADMIN, UserRole.ADMIN), else_=UserRole.USER),
                },
                synchronize_session=False,
            )
        )
        db.commit()
        if revoked:
            logger.info(f"Revoked premium from {revoked} expired subscriptions")
        return revoked

    @staticmethod
    def find_inconsistencies(db: Session) -> List[Payment]:
        """SUCCESS payments whose entitlement was never applied."""
        return (
            db.query(Payment)
            .filter(Payment.status == PaymentStatus.SUCCESS, Payment.entitlement_granted_at.is_(None))
            .order_by(Payment.updated_at.asc())
            .all()
        )

    @staticmethod
    def assert_consistent(db: Session) -> None:
        orphans = SubscriptionService.find_inconsistencies(db)
        if orphans:
            raise InconsistentState(
                f"{len(orphans)} successful payments without premium entitlement",
                context=[p.transaction_id for p in orphans],
            )

    @staticmethod
    def reconcile_entitlements(db: Session) -> Dict[str, int]:
        """Repair SUCCESS payments that never produced an entitlement.

        The entitlement is dated from when the payment settled, so a repaired
        user gets exactly the window they paid for. Payments whose window has
        already closed are only stamped.
        """
        now = utcnow()
        orphans = SubscriptionService.find_inconsistencies(db)
        repaired = 0
        for payment in orphans:
            logger.warning(
                f"{InconsistentState.default_detail}: payment {payment.transaction_id} "
                f"is SUCCESS but user {payment.user_id} was never granted premium"
            )
            expires_at = payment.updated_at + timedelta(days=payment.duration_in_days)
            if expires_at <= now:
                db.query(Payment).filter(
                    Payment.id == payment.id, Payment.entitlement_granted_at.is_(None)
                ).update({Payment.entitlement_granted_at: now}, synchronize_session=False)
            elif SubscriptionService.grant_entitlement(payment, db, expires_at=expires_at):
                repaired += 1
            db.commit()
        return {"checked": len(orphans), "repaired": repaired}

    @staticmethod
    def set_premium_status(
            user_id: int, is_premium: bool, db: Session, subscription_duration: Optional[int] = None
    ) -> User:
        """Manual override of a user's premium status."""
        user = AuthService.get_user(user_id, db)
        subscription_duration = subscription_duration or settings.DEFAULT_PREMIUM_DURATION_DAYS
        user.is_premium = is_premium
        user.subscription_expiry_date = utcnow() + timedelta(days=subscription_duration) if is_premium else None
        if user.role != UserRole.ADMIN:
            user.role = UserRole.PREMIUM if is_premium else UserRole.USER
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def has_premium_access(user: Optional[User]) -> bool:
        """Admins always; premium users until their expiry date, even before the sweep runs."""
        if user is None:
            return False
        if user.role == UserRole.ADMIN:
            return True
        if not user.is_premium:
            return False
        return user.subscription_expiry_date is None or user.subscription_expiry_date > utcnow()

    @staticmethod
    def get_user_subscription_history(user_id: int, db: Session) -> List[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .all()
        )
