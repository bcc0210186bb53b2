# src/vote/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from vote.services import VoteService, VOTE_SORTABLE_FIELDS
from vote.schemas import PaginatedVoteResponse, VoteCreate, VoteFilters, VoteResult
from auth.routes import get_current_user, get_optional_user, check_admin_role
from auth.models import User
from database import get_db
from utils.pagination import PaginationOptions, pagination_params

router = APIRouter(prefix="/votes", tags=["votes"])
vote_pagination = pagination_params(VOTE_SORTABLE_FIELDS)


def vote_filters(type: Optional[str] = None) -> VoteFilters:
    return VoteFilters(type=type)


@router.get("", response_model=PaginatedVoteResponse, dependencies=[Depends(check_admin_role)])
def list_votes(
    type: Optional[str] = None,
    user_id: Optional[int] = None,
    food_spot_id: Optional[int] = None,
    options: PaginationOptions = Depends(vote_pagination),
    db: Session = Depends(get_db),
):
    """All votes (admin)."""
    filters = VoteFilters(type=type, user_id=user_id, food_spot_id=food_spot_id)
    return VoteService.list_votes(filters, options, db)


@router.get("/user/my-votes", response_model=PaginatedVoteResponse)
def list_my_votes(
    filters: VoteFilters = Depends(vote_filters),
    options: PaginationOptions = Depends(vote_pagination),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return VoteService.list_for_user(current_user.id, filters, options, db)


@router.get("/food-spot/{spot_id}", response_model=PaginatedVoteResponse)
def list_food_spot_votes(
    spot_id: int,
    filters: VoteFilters = Depends(vote_filters),
    options: PaginationOptions = Depends(vote_pagination),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return VoteService.list_for_food_spot(spot_id, filters, options, viewer, db)


@router.post("", response_model=VoteResult)
def cast_vote(
    data: VoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    vote, spot = VoteService.cast_vote(data.food_spot_id, data.type, current_user, db)
    return {"vote": vote, "total_upvotes": spot.total_upvotes, "total_downvotes": spot.total_downvotes}


@router.delete("/{spot_id}", response_model=VoteResult)
def delete_vote(
    spot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Withdraw the current user's vote on a spot."""
    spot = VoteService.delete_vote(spot_id, current_user, db)
    return {"vote": None, "total_upvotes": spot.total_upvotes, "total_downvotes": spot.total_downvotes}
