# src/vote/services.py
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from auth.models import User
from errors import BadRequest, NotFound
from foodspot.models import ApprovalStatus, FoodSpot
from foodspot.services import FoodSpotService
from utils.pagination import PaginationOptions, apply_filters, paginate
from vote.models import Vote
from vote.schemas import VoteFilters

logger = logging.getLogger(__name__)

VOTE_SORTABLE_FIELDS = ["created_at", "updated_at", "type"]


class VoteService:
    @staticmethod
    def list_votes(filters: VoteFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        query = apply_filters(db.query(Vote), Vote, filters.model_dump())
        return paginate(query, Vote, options)

    @staticmethod
    def list_for_user(user_id: int, filters: VoteFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        return VoteService.list_votes(filters.model_copy(update={"user_id": user_id}), options, db)

    @staticmethod
    def list_for_food_spot(
            spot_id: int, filters: VoteFilters, options: PaginationOptions, viewer: Optional[User], db: Session
    ) -> Dict[str, Any]:
        FoodSpotService.get_visible(spot_id, viewer, db)
        return VoteService.list_votes(filters.model_copy(update={"food_spot_id": spot_id}), options, db)

    @staticmethod
    def cast_vote(spot_id: int, vote_type: str, user: User, db: Session) -> Tuple[Optional[Vote], FoodSpot]:
        """Up- or downvote a spot.

        Casting the vote the user already has removes it; casting the other
        type switches it. Returns the user's vote (None once removed) and the
        spot with refreshed counters.
        """
        spot = FoodSpotService.get_visible(spot_id, user, db)
        if spot.approval_status != ApprovalStatus.APPROVED:
            raise BadRequest("Only approved food spots can be voted on")

        vote = db.query(Vote).filter(Vote.food_spot_id == spot_id, Vote.user_id == user.id).first()
        if vote is None:
            vote = Vote(type=vote_type, user_id=user.id, food_spot_id=spot_id)
            db.add(vote)
        elif vote.type == vote_type:
            db.delete(vote)
            vote = None
        else:
            vote.type = vote_type
        db.flush()
        FoodSpotService.refresh_votes(spot_id, db)
        db.commit()

        if vote is not None:
            db.refresh(vote)
        db.refresh(spot)
        logger.info(f"User {user.id} vote on food spot {spot_id}: {vote.type if vote else 'removed'}")
        return vote, spot

    @staticmethod
    def delete_vote(spot_id: int, user: User, db: Session) -> FoodSpot:
        vote = db.query(Vote).filter(Vote.food_spot_id == spot_id, Vote.user_id == user.id).first()
        if vote is None:
            raise NotFound("Vote not found")
        db.delete(vote)
        db.flush()
        FoodSpotService.refresh_votes(spot_id, db)
        db.commit()
        return FoodSpotService.get(spot_id, db)
