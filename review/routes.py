# src/review/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from review.services import ReviewService, REVIEW_SORTABLE_FIELDS
from review.schemas import (
    PaginatedReviewResponse,
    ReviewCreate,
    ReviewFilters,
    ReviewResponse,
    ReviewUpdate,
)
from auth.routes import get_current_user, get_optional_user
from auth.models import User
from database import get_db
from utils.pagination import PaginationOptions, pagination_params

router = APIRouter(prefix="/reviews", tags=["reviews"])
review_pagination = pagination_params(REVIEW_SORTABLE_FIELDS)


def review_filters(
    rating: Optional[int] = None,
    user_id: Optional[int] = None,
    food_spot_id: Optional[int] = None,
    search_term: Optional[str] = None,
) -> ReviewFilters:
    return ReviewFilters(rating=rating, user_id=user_id, food_spot_id=food_spot_id, search_term=search_term)


@router.get("", response_model=PaginatedReviewResponse)
def list_reviews(
    filters: ReviewFilters = Depends(review_filters),
    options: PaginationOptions = Depends(review_pagination),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return ReviewService.list_reviews(filters, options, viewer, db)


@router.get("/user/my-reviews", response_model=PaginatedReviewResponse)
def list_my_reviews(
    filters: ReviewFilters = Depends(review_filters),
    options: PaginationOptions = Depends(review_pagination),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ReviewService.list_for_user(current_user.id, filters, options, db)


@router.get("/food-spot/{spot_id}", response_model=PaginatedReviewResponse)
def list_food_spot_reviews(
    spot_id: int,
    filters: ReviewFilters = Depends(review_filters),
    options: PaginationOptions = Depends(review_pagination),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return ReviewService.list_for_food_spot(spot_id, filters, options, viewer, db)


@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(
    review_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return ReviewService.get_visible(review_id, viewer, db)


@router.post("", response_model=ReviewResponse, status_code=201)
def create_review(
    data: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rate and comment on a food spot. One review per spot."""
    return ReviewService.create_review(data.food_spot_id, data, current_user, db)


@router.patch("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    data: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ReviewService.update_review(review_id, data, current_user, db)


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ReviewService.delete_review(review_id, current_user, db)
    return {"message": "Review deleted"}
