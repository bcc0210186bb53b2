# src/vote/models.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from utils.dates import utcnow


class VoteType:
    UPVOTE = "UPVOTE"
    DOWNVOTE = "DOWNVOTE"


class Vote(Base):
    __tablename__ = "votes"

    id: int = Column(Integer, primary_key=True, index=True)
    type: str = Column(String, nullable=False)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    food_spot_id: int = Column(Integer, ForeignKey("food_spots.id"), nullable=False, index=True)
    created_at: datetime = Column(DateTime, default=utcnow)
    updated_at: datetime = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    food_spot = relationship("FoodSpot", back_populates="votes")

    __table_args__ = (UniqueConstraint('user_id', 'food_spot_id', name='unique_vote_user_food_spot'),)
