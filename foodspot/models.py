# src/foodspot/models.py
from sqlalchemy import Column, Integer, String, ForeignKey, Text, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from typing import Optional
from utils.dates import utcnow


class FoodCategory:
    SNACKS = "SNACKS"
    MEALS = "MEALS"
    SWEETS = "SWEETS"
    DRINKS = "DRINKS"
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    DESSERTS = "DESSERTS"
    STREET_FOOD = "STREET_FOOD"

    ALL = (SNACKS, MEALS, SWEETS, DRINKS, BREAKFAST, LUNCH, DINNER, DESSERTS, STREET_FOOD)


class ApprovalStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class FoodSpot(Base):
    """A place to eat, submitted by a user and published once an admin approves it."""
    __tablename__ = "food_spots"

    id: int = Column(Integer, primary_key=True, index=True)
    title: str = Column(String, nullable=False)
    description: str = Column(Text, nullable=False)
    location: str = Column(String, nullable=False)
    address: Optional[str] = Column(String, nullable=True)
    min_price: float = Column(Numeric(10, 2), nullable=False)
    max_price: float = Column(Numeric(10, 2), nullable=False)
    category: str = Column(String, nullable=False, index=True)
    image: str = Column(String, nullable=False)
    is_premium: bool = Column(Boolean, nullable=False, default=False, index=True)
    approval_status: str = Column(String, nullable=False, default=ApprovalStatus.PENDING, index=True)
    rejection_reason: Optional[str] = Column(Text, nullable=True)
    creator_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Aggregates, recomputed whenever a review or vote changes
    total_rating: int = Column(Integer, nullable=False, default=0)
    review_count: int = Column(Integer, nullable=False, default=0)
    total_upvotes: int = Column(Integer, nullable=False, default=0)
    total_downvotes: int = Column(Integer, nullable=False, default=0)
    created_at: datetime = Column(DateTime, default=utcnow)
    updated_at: datetime = Column(DateTime, default=utcnow, onupdate=utcnow)

    creator = relationship("User")
    reviews = relationship(
        "Review", back_populates="food_spot", cascade="all, delete-orphan", order_by="Review.created_at.desc()"
    )
    votes = relationship("Vote", back_populates="food_spot", cascade="all, delete-orphan")

    @property
    def average_rating(self) -> float:
        if not self.review_count:
            return 0.0
        return self.total_rating / self.review_count

    @property
    def creator_name(self) -> Optional[str]:
        return self.creator.name if self.creator else None
