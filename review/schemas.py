# src/review/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from utils.pagination import PaginationMeta


class ReviewContent(BaseModel):
    """Rating and comment, as posted against a food spot."""
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1)


class ReviewCreate(ReviewContent):
    food_spot_id: int


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, min_length=1)


class ReviewFilters(BaseModel):
    rating: Optional[int] = None
    user_id: Optional[int] = None
    food_spot_id: Optional[int] = None
    search_term: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    rating: int
    comment: str
    user_id: int
    user_name: Optional[str]
    food_spot_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginatedReviewResponse(BaseModel):
    meta: PaginationMeta
    data: List[ReviewResponse]
