# src/review/models.py
from sqlalchemy import Column, Integer, ForeignKey, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from utils.dates import utcnow


class Review(Base):
    """One user's rating (1-5) and comment on a food spot."""
    __tablename__ = "reviews"

    id: int = Column(Integer, primary_key=True, index=True)
    rating: int = Column(Integer, nullable=False)
    comment: str = Column(Text, nullable=False)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    food_spot_id: int = Column(Integer, ForeignKey("food_spots.id"), nullable=False, index=True)
    created_at: datetime = Column(DateTime, default=utcnow)
    updated_at: datetime = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    food_spot = relationship("FoodSpot", back_populates="reviews")

    __table_args__ = (UniqueConstraint('user_id', 'food_spot_id', name='unique_review_user_food_spot'),)

    @property
    def user_name(self):
        return self.user.name if self.user else None
