# src/payment/services.py
import logging
import secrets
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from auth.models import User
from errors import InvalidTransition, NotFound
from payment.models import Payment, PaymentStatus
from payment.schemas import PaymentFilters
from utils.dates import utcnow
from utils.pagination import PaginationOptions, apply_filters, apply_search, paginate

logger = logging.getLogger(__name__)

PAYMENT_SEARCHABLE_FIELDS = ["transaction_id", "plan_id"]
PAYMENT_SORTABLE_FIELDS = ["created_at", "updated_at", "amount", "status"]


def generate_transaction_id(now: Optional[datetime] = None) -> str:
    """Unguessable, globally unique correlation key sent to the gateway as tran_id."""
    now = now or utcnow()
    return f"FOOD-SPOT-{now:%Y%m%d}-{secrets.token_hex(16)}"


class PaymentLedger:
    """Durable record of every purchase attempt and its outcome."""

    @staticmethod
    def create(
            user_id: int,
            plan_id: str,
            amount: float,
            currency: str,
            duration_in_days: int,
            db: Session,
            payment_method: str = "sslcommerz",
    ) -> Payment:
        """Persist a PENDING payment with a fresh transaction id."""
        if db.query(User.id).filter(User.id == user_id).first() is None:
            raise NotFound("User not found")

        payment = Payment(
            user_id=user_id,
            plan_id=plan_id,
            amount=Decimal(str(amount)),
            currency=currency,
            status=PaymentStatus.PENDING,
            payment_method=payment_method,
            transaction_id=generate_transaction_id(),
            gateway_data={},
            duration_in_days=duration_in_days,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        logger.info(f"Payment {payment.transaction_id} created for user {user_id}, plan {plan_id}")
        return payment

    @staticmethod
    def get(payment_id: int, db: Session) -> Payment:
        payment = db.query(Payment).filter(Payment.id == payment_id).first()
        if payment is None:
            raise NotFound("Payment not found")
        return payment

    @staticmethod
    def find_by_transaction_id(transaction_id: str, db: Session) -> Payment:
        payment = db.query(Payment).filter(Payment.transaction_id == transaction_id).first()
        if payment is None:
            raise NotFound("Payment not found")
        return payment

    @staticmethod
    def attach_gateway_session(payment_id: int, raw_response: Dict[str, Any], db: Session) -> None:
        """Store the gateway's checkout-session payload. Status is left untouched."""
        payment = PaymentLedger.get(payment_id, db)
        payment.gateway_data = {**(payment.gateway_data or {}), "session": raw_response}
        db.commit()

    @staticmethod
    def mark_terminal(
            transaction_id: str,
            status: str,
            db: Session,
            extra_data: Optional[Dict[str, Any]] = None,
            commit: bool = True,
    ) -> Payment:
        """Move a PENDING payment to a terminal status.

        The transition is a single conditional UPDATE guarded by
        ``status = 'PENDING'``, so across any number of sessions or processes
        only one caller can win it. Losers get ``InvalidTransition``.

        With ``commit=False`` the update is left in the caller's transaction.
        """
        if status not in PaymentStatus.TERMINAL:
            raise ValueError(f"{status} is not a terminal payment status")

        values: Dict[Any, Any] = {Payment.status: status, Payment.updated_at: utcnow()}
        if extra_data is not None:
            current = db.query(Payment.gateway_data).filter(Payment.transaction_id == transaction_id).scalar()
            values[Payment.gateway_data] = {**(current or {}), "verification": extra_data}

        updated = (
            db.query(Payment)
            .filter(Payment.transaction_id == transaction_id, Payment.status == PaymentStatus.PENDING)
            .update(values, synchronize_session=False)
        )
        if updated == 0:
            payment = db.query(Payment).populate_existing().filter(Payment.transaction_id == transaction_id).first()
            if payment is None:
                raise NotFound("Payment not found")
            raise InvalidTransition(
                f"Payment is already {payment.status.lower()}",
                context={"transaction_id": transaction_id, "status": payment.status},
            )

        if commit:
            db.commit()
        logger.info(f"Payment {transaction_id} moved PENDING -> {status}")
        return (
            db.query(Payment)
            .populate_existing()
            .filter(Payment.transaction_id == transaction_id)
            .one()
        )

    @staticmethod
    def list_for_user(user_id: int, filters: PaymentFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        filters = filters.model_copy(update={"user_id": user_id})
        return PaymentLedger.list_all(filters, options, db)

    @staticmethod
    def list_all(filters: PaymentFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        query = db.query(Payment)
        query = apply_search(query, Payment, filters.search_term, PAYMENT_SEARCHABLE_FIELDS)
        query = apply_filters(query, Payment, filters.model_dump(exclude={"search_term"}))
        return paginate(query, Payment, options)
