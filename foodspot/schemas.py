# src/foodspot/schemas.py
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Literal, Optional

from review.schemas import ReviewResponse
from utils.pagination import PaginationMeta

Category = Literal[
    "SNACKS", "MEALS", "SWEETS", "DRINKS", "BREAKFAST", "LUNCH", "DINNER", "DESSERTS", "STREET_FOOD"
]


class FoodSpotCreate(BaseModel):
    """Schema for submitting a food spot."""
    title: str = Field(min_length=1)
    description: str
    location: str
    address: Optional[str] = None
    min_price: float = Field(ge=0)
    max_price: float = Field(ge=0)
    category: Category
    image: str
    is_premium: bool = False

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price > self.max_price:
            raise ValueError("min_price cannot be greater than max_price")
        return self


class FoodSpotUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    category: Optional[Category] = None
    image: Optional[str] = None
    is_premium: Optional[bool] = None


class ApprovalUpdate(BaseModel):
    approval_status: Literal["APPROVED", "REJECTED"]
    rejection_reason: Optional[str] = None


class FoodSpotFilters(BaseModel):
    """Filters accepted by food spot listings."""
    search_term: Optional[str] = None
    category: Optional[str] = None
    price_range: Optional[str] = None  # "<min>-<max>"
    is_premium: Optional[bool] = None


class FoodSpotResponse(BaseModel):
    """Schema for food spot response."""
    id: int
    title: str
    description: str
    location: str
    address: Optional[str]
    min_price: float
    max_price: float
    category: str
    image: str
    is_premium: bool
    approval_status: str
    rejection_reason: Optional[str]
    creator_id: int
    creator_name: Optional[str]
    average_rating: float
    review_count: int
    total_upvotes: int
    total_downvotes: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FoodSpotDetailResponse(FoodSpotResponse):
    reviews: List[ReviewResponse] = []


class PaginatedFoodSpotResponse(BaseModel):
    meta: PaginationMeta
    data: List[FoodSpotResponse]
