# src/review/services.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from auth.models import User
from errors import BadRequest, Conflict, Forbidden, NotFound
from foodspot.models import ApprovalStatus, FoodSpot
from foodspot.services import FoodSpotService, is_admin
from review.models import Review
from review.schemas import ReviewContent, ReviewFilters, ReviewUpdate
from subscription.services import SubscriptionService
from utils.pagination import PaginationOptions, apply_filters, apply_search, paginate

logger = logging.getLogger(__name__)

REVIEW_SEARCHABLE_FIELDS = ["comment"]
REVIEW_SORTABLE_FIELDS = ["created_at", "rating", "updated_at"]


class ReviewService:
    @staticmethod
    def _visible(viewer: Optional[User], db: Session) -> Query:
        """Reviews on approved spots the viewer may see."""
        query = (
            db.query(Review)
            .join(FoodSpot, Review.food_spot_id == FoodSpot.id)
            .filter(FoodSpot.approval_status == ApprovalStatus.APPROVED)
        )
        if not SubscriptionService.has_premium_access(viewer):
            query = query.filter(FoodSpot.is_premium.is_(False))
        return query

    @staticmethod
    def _filtered(query: Query, filters: ReviewFilters) -> Query:
        query = apply_search(query, Review, filters.search_term, REVIEW_SEARCHABLE_FIELDS)
        return apply_filters(query, Review, filters.model_dump(exclude={"search_term"}))

    @staticmethod
    def list_reviews(
            filters: ReviewFilters, options: PaginationOptions, viewer: Optional[User], db: Session
    ) -> Dict[str, Any]:
        query = ReviewService._filtered(ReviewService._visible(viewer, db), filters)
        return paginate(query, Review, options)

    @staticmethod
    def list_for_user(user_id: int, filters: ReviewFilters, options: PaginationOptions, db: Session) -> Dict[str, Any]:
        filters = filters.model_copy(update={"user_id": user_id})
        return paginate(ReviewService._filtered(db.query(Review), filters), Review, options)

    @staticmethod
    def list_for_food_spot(
            spot_id: int, filters: ReviewFilters, options: PaginationOptions, viewer: Optional[User], db: Session
    ) -> Dict[str, Any]:
        FoodSpotService.get_visible(spot_id, viewer, db)
        filters = filters.model_copy(update={"food_spot_id": spot_id})
        return paginate(ReviewService._filtered(db.query(Review), filters), Review, options)

    @staticmethod
    def get(review_id: int, db: Session) -> Review:
        review = db.query(Review).filter(Review.id == review_id).first()
        if review is None:
            raise NotFound("Review not found")
        return review

    @staticmethod
    def get_visible(review_id: int, viewer: Optional[User], db: Session) -> Review:
        review = ReviewService.get(review_id, db)
        FoodSpotService.get_visible(review.food_spot_id, viewer, db)
        return review

    @staticmethod
    def create_review(spot_id: int, data: ReviewContent, user: User, db: Session) -> Review:
        """One review per user and spot; the spot's rating aggregate is updated in the same commit."""
        spot = FoodSpotService.get_visible(spot_id, user, db)
        if spot.approval_status != ApprovalStatus.APPROVED:
            raise BadRequest("Only approved food spots can be reviewed")
        if db.query(Review.id).filter(Review.food_spot_id == spot_id, Review.user_id == user.id).first():
            raise Conflict("You have already reviewed this food spot")

        review = Review(rating=data.rating, comment=data.comment, user_id=user.id, food_spot_id=spot_id)
        db.add(review)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise Conflict("You have already reviewed this food spot")
        FoodSpotService.refresh_rating(spot_id, db)
        db.commit()
        db.refresh(review)
        logger.info(f"User {user.id} reviewed food spot {spot_id} ({data.rating}/5)")
        return review

    @staticmethod
    def _check_owner(review: Review, user: User) -> None:
        if review.user_id != user.id and not is_admin(user):
            raise Forbidden("You do not own this review")

    @staticmethod
    def update_review(review_id: int, data: ReviewUpdate, user: User, db: Session) -> Review:
        review = ReviewService.get(review_id, db)
        ReviewService._check_owner(review, user)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(review, field, value)
        db.flush()
        FoodSpotService.refresh_rating(review.food_spot_id, db)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def delete_review(review_id: int, user: User, db: Session) -> None:
        review = ReviewService.get(review_id, db)
        ReviewService._check_owner(review, user)
        spot_id = review.food_spot_id
        db.delete(review)
        db.flush()
        FoodSpotService.refresh_rating(spot_id, db)
        db.commit()
        logger.info(f"Review {review_id} on food spot {spot_id} deleted by user {user.id}")
