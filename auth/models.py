# src/auth/models.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from utils.dates import utcnow


class UserRole:
    USER = "USER"
    PREMIUM = "PREMIUM"
    ADMIN = "ADMIN"


class User(Base):
    """Represents a user in the system."""
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String, nullable=False)
    email: str = Column(String, unique=True, index=True, nullable=False)
    password_hash: str = Column(String, nullable=False)
    role: str = Column(String, nullable=False, default=UserRole.USER)
    is_blocked: bool = Column(Boolean, nullable=False, default=False)
    is_premium: bool = Column(Boolean, nullable=False, default=False, index=True)
    subscription_expiry_date: datetime = Column(DateTime, nullable=True, index=True)
    created_at: datetime = Column(DateTime, default=utcnow)
    updated_at: datetime = Column(DateTime, default=utcnow, onupdate=utcnow)

    payments = relationship("Payment", back_populates="user")
    admin_actions = relationship("AdminActionLog", back_populates="admin")


class AdminActionLog(Base):
    """Represents a log of admin (or scheduled system) actions."""
    __tablename__ = "admin_action_logs"

    id: int = Column(Integer, primary_key=True, index=True)
    admin_id: int = Column(Integer, ForeignKey("users.id"), nullable=True)  # None for scheduled jobs
    action: str = Column(String, nullable=False)
    timestamp: datetime = Column(DateTime, nullable=False, default=utcnow)

    admin = relationship("User", back_populates="admin_actions")
