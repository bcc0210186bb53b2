# src/foodspot/services.py
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from auth.models import User, UserRole
from errors import BadRequest, Forbidden, NotFound, PremiumRequired
from foodspot.models import ApprovalStatus, FoodSpot
from foodspot.schemas import ApprovalUpdate, FoodSpotCreate, FoodSpotFilters, FoodSpotUpdate
from review.models import Review
from subscription.services import SubscriptionService
from utils.pagination import PaginationOptions, apply_filters, apply_search, paginate
from vote.models import Vote, VoteType

logger = logging.getLogger(__name__)

FOOD_SPOT_SEARCHABLE_FIELDS = ["title", "description", "location", "address"]
FOOD_SPOT_SORTABLE_FIELDS = [
    "created_at", "title", "min_price", "max_price", "total_rating", "total_upvotes", "updated_at",
]


def parse_price_range(price_range: Optional[str]) -> Optional[Tuple[Decimal, Decimal]]:
    """Parse "<min>-<max>" into a pair of prices."""
    if not price_range:
        return None
    try:
        low, high = (Decimal(part.strip()) for part in price_range.split("-", 1))
    except (ValueError, ArithmeticError):
        raise BadRequest("price_range must look like <min>-<max>")
    if low > high:
        raise BadRequest("price_range minimum is greater than its maximum")
    return low, high


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN


class FoodSpotService:
    @staticmethod
    def _apply_filters(query: Query, filters: FoodSpotFilters) -> Query:
        query = apply_search(query, FoodSpot, filters.search_term, FOOD_SPOT_SEARCHABLE_FIELDS)
        query = apply_filters(query, FoodSpot, filters.model_dump(include={"category", "is_premium"}))
        price_range = parse_price_range(filters.price_range)
        if price_range:
            low, high = price_range
            # Spots whose price range overlaps the requested one
            query = query.filter(FoodSpot.max_price >= low, FoodSpot.min_price <= high)
        return query

    @staticmethod
    def list_food_spots(
            filters: FoodSpotFilters, options: PaginationOptions, viewer: Optional[User], db: Session
    ) -> Dict[str, Any]:
        """Approved spots. Premium spots are left out unless the viewer has premium access."""
        query = db.query(FoodSpot).filter(FoodSpot.approval_status == ApprovalStatus.APPROVED)
        if not SubscriptionService.has_premium_access(viewer):
            query = query.filter(FoodSpot.is_premium.is_(False))
        query = FoodSpotService._apply_filters(query, filters)
        return paginate(query, FoodSpot, options)

    @staticmethod
    def list_for_user(user_id: int, filters: FoodSpotFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        """Everything a user has submitted, whatever its approval status."""
        query = db.query(FoodSpot).filter(FoodSpot.creator_id == user_id)
        query = FoodSpotService._apply_filters(query, filters)
        return paginate(query, FoodSpot, options)

    @staticmethod
    def list_pending(options: PaginationOptions, db: Session) -> Dict[str, Any]:
        query = db.query(FoodSpot).filter(FoodSpot.approval_status == ApprovalStatus.PENDING)
        return paginate(query, FoodSpot, options)

    @staticmethod
    def get(spot_id: int, db: Session) -> FoodSpot:
        spot = db.query(FoodSpot).filter(FoodSpot.id == spot_id).first()
        if spot is None:
            raise NotFound("Food spot not found")
        return spot

    @staticmethod
    def get_visible(spot_id: int, viewer: Optional[User], db: Session) -> FoodSpot:
        """A spot as the given viewer is allowed to see it.

        Unapproved spots exist only for their creator and admins. Premium
        spots need premium access unless the viewer created them.
        """
        spot = FoodSpotService.get(spot_id, db)
        is_owner = viewer is not None and spot.creator_id == viewer.id
        if spot.approval_status != ApprovalStatus.APPROVED and not (is_owner or is_admin(viewer)):
            raise NotFound("Food spot not found")
        if spot.is_premium and not is_owner and not SubscriptionService.has_premium_access(viewer):
            raise PremiumRequired("This food spot is only available to premium members")
        return spot

    @staticmethod
    def _check_owner(spot: FoodSpot, user: User) -> None:
        if spot.creator_id != user.id and not is_admin(user):
            raise Forbidden("You do not own this food spot")

    @staticmethod
    def create_food_spot(user_id: int, data: FoodSpotCreate, db: Session) -> FoodSpot:
        """Submit a new spot. It waits in PENDING until an admin reviews it."""
        spot = FoodSpot(**data.model_dump(), creator_id=user_id, approval_status=ApprovalStatus.PENDING)
        db.add(spot)
        db.commit()
        db.refresh(spot)
        logger.info(f"Food spot {spot.id} submitted by user {user_id}")
        return spot

    @staticmethod
    def update_food_spot(spot_id: int, data: FoodSpotUpdate, user: User, db: Session) -> FoodSpot:
        """Edit a spot. An edit by its creator sends it back to the approval queue."""
        spot = FoodSpotService.get(spot_id, db)
        FoodSpotService._check_owner(spot, user)

        changes = data.model_dump(exclude_unset=True)
        min_price = changes.get("min_price", spot.min_price)
        max_price = changes.get("max_price", spot.max_price)
        if min_price is not None and max_price is not None and Decimal(str(min_price)) > Decimal(str(max_price)):
            raise BadRequest("min_price cannot be greater than max_price")

        for field, value in changes.items():
            setattr(spot, field, value)
        if not is_admin(user) and spot.approval_status != ApprovalStatus.PENDING:
            spot.approval_status = ApprovalStatus.PENDING
            spot.rejection_reason = None
            logger.info(f"Food spot {spot_id} edited by its creator, back to PENDING")
        db.commit()
        db.refresh(spot)
        return spot

    @staticmethod
    def delete_food_spot(spot_id: int, user: User, db: Session) -> None:
        """Delete a spot together with its reviews and votes."""
        spot = FoodSpotService.get(spot_id, db)
        FoodSpotService._check_owner(spot, user)
        db.delete(spot)
        db.commit()
        logger.info(f"Food spot {spot_id} deleted by user {user.id}")

    @staticmethod
    def update_approval_status(spot_id: int, data: ApprovalUpdate, db: Session) -> FoodSpot:
        spot = FoodSpotService.get(spot_id, db)
        if data.approval_status == ApprovalStatus.REJECTED and not data.rejection_reason:
            raise BadRequest("Rejection reason is required")
        spot.approval_status = data.approval_status
        spot.rejection_reason = data.rejection_reason if data.approval_status == ApprovalStatus.REJECTED else None
        db.commit()
        db.refresh(spot)
        logger.info(f"Food spot {spot_id} is now {spot.approval_status}")
        return spot

    @staticmethod
    def refresh_rating(spot_id: int, db: Session) -> None:
        """Recompute total_rating and review_count from the reviews table. Does not commit."""
        total, count = (
            db.query(func.coalesce(func.sum(Review.rating), 0), func.count(Review.id))
            .filter(Review.food_spot_id == spot_id)
            .one()
        )
        db.query(FoodSpot).filter(FoodSpot.id == spot_id).update(
            {FoodSpot.total_rating: total, FoodSpot.review_count: count}, synchronize_session=False
        )

    @staticmethod
    def refresh_votes(spot_id: int, db: Session) -> None:
        """Recompute the up/down vote counters from the votes table. Does not commit."""
        counts = dict(
            db.query(Vote.type, func.count(Vote.id))
            .filter(Vote.food_spot_id == spot_id)
            .group_by(Vote.type)
            .all()
        )
        db.query(FoodSpot).filter(FoodSpot.id == spot_id).update(
            {
                FoodSpot.total_upvotes: counts.get(VoteType.UPVOTE, 0),
                FoodSpot.total_downvotes: counts.get(VoteType.DOWNVOTE, 0),
            },
            synchronize_session=False,
        )
