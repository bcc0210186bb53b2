# src/foodspot/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from foodspot.services import FoodSpotService, FOOD_SPOT_SORTABLE_FIELDS
from foodspot.schemas import (
    ApprovalUpdate,
    FoodSpotCreate,
    FoodSpotDetailResponse,
    FoodSpotFilters,
    FoodSpotResponse,
    FoodSpotUpdate,
    PaginatedFoodSpotResponse,
)
from review.schemas import ReviewContent, ReviewResponse
from review.services import ReviewService
from vote.schemas import VoteCast, VoteResult
from vote.services import VoteService
from admin.routes import log_admin_action
from auth.routes import get_current_user, get_optional_user, check_admin_role
from auth.models import User
from database import get_db
from utils.pagination import PaginationOptions, pagination_params

router = APIRouter(prefix="/food-spots", tags=["food-spots"])
food_spot_pagination = pagination_params(FOOD_SPOT_SORTABLE_FIELDS)


def food_spot_filters(
    search_term: Optional[str] = None,
    category: Optional[str] = None,
    price_range: Optional[str] = None,
    is_premium: Optional[bool] = None,
) -> FoodSpotFilters:
    return FoodSpotFilters(search_term=search_term, category=category, price_range=price_range, is_premium=is_premium)


@router.get("", response_model=PaginatedFoodSpotResponse)
def list_food_spots(
    filters: FoodSpotFilters = Depends(food_spot_filters),
    options: PaginationOptions = Depends(food_spot_pagination),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    """Approved food spots; premium ones only for premium members."""
    return FoodSpotService.list_food_spots(filters, options, viewer, db)


@router.get("/user/my-food-spots", response_model=PaginatedFoodSpotResponse)
def list_my_food_spots(
    filters: FoodSpotFilters = Depends(food_spot_filters),
    options: PaginationOptions = Depends(food_spot_pagination),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FoodSpotService.list_for_user(current_user.id, filters, options, db)


@router.get("/admin/pending", response_model=PaginatedFoodSpotResponse, dependencies=[Depends(check_admin_role)])
def list_pending_food_spots(
    options: PaginationOptions = Depends(food_spot_pagination),
    db: Session = Depends(get_db),
):
    """Spots waiting for approval."""
    return FoodSpotService.list_pending(options, db)


@router.patch("/admin/{spot_id}/approval", response_model=FoodSpotResponse)
def update_approval_status(
    spot_id: int,
    data: ApprovalUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(check_admin_role),
):
    """Approve or reject a submitted spot."""
    spot = FoodSpotService.update_approval_status(spot_id, data, db)
    log_admin_action(current_user.id, f"Set food spot {spot_id} to {data.approval_status}", db)
    return spot


@router.get("/{spot_id}", response_model=FoodSpotDetailResponse)
def get_food_spot(
    spot_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return FoodSpotService.get_visible(spot_id, viewer, db)


@router.post("", response_model=FoodSpotResponse, status_code=201)
def create_food_spot(
    data: FoodSpotCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Submit a food spot for approval."""
    return FoodSpotService.create_food_spot(current_user.id, data, db)


@router.patch("/{spot_id}", response_model=FoodSpotResponse)
def update_food_spot(
    spot_id: int,
    data: FoodSpotUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FoodSpotService.update_food_spot(spot_id, data, current_user, db)


@router.delete("/{spot_id}")
def delete_food_spot(
    spot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    FoodSpotService.delete_food_spot(spot_id, current_user, db)
    return {"message": "Food spot deleted"}


@router.post("/{spot_id}/reviews", response_model=ReviewResponse, status_code=201)
def review_food_spot(
    spot_id: int,
    data: ReviewContent,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ReviewService.create_review(spot_id, data, current_user, db)


@router.post("/{spot_id}/votes", response_model=VoteResult)
def vote_food_spot(
    spot_id: int,
    data: VoteCast,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cast, switch or (by repeating it) withdraw a vote."""
    vote, spot = VoteService.cast_vote(spot_id, data.type, current_user, db)
    return {"vote": vote, "total_upvotes": spot.total_upvotes, "total_downvotes": spot.total_downvotes}
