# src/payment/models.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from utils.dates import utcnow


class PaymentStatus:
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    TERMINAL = (SUCCESS, FAILED, CANCELLED)


class Payment(Base):
    """Represents one purchase attempt (ledger entry)."""
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    plan_id: str = Column(String, nullable=False)  # static catalog id, not a FK
    amount = Column(Numeric(12, 2), nullable=False)
    currency: str = Column(String, nullable=False)
    status: str = Column(String, nullable=False, default=PaymentStatus.PENDING, index=True)
    payment_method: str = Column(String, nullable=False, default="sslcommerz")
    transaction_id: str = Column(String, nullable=False, unique=True, index=True)
    gateway_data: dict = Column(JSON, nullable=True)
    duration_in_days: int = Column(Integer, nullable=False)
    entitlement_granted_at: datetime = Column(DateTime, nullable=True)
    created_at: datetime = Column(DateTime, default=utcnow)
    updated_at: datetime = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="payments")

    @property
    def is_terminal(self) -> bool:
        return self.status in PaymentStatus.TERMINAL
