# app/modules/reviews/service.py
from typing import List, Optional
from datetime import datetime, timezone
import logging

from app.core.exceptions import (
    Conflict, Forbidden, InvalidState, NotFound, ValidationError
)
from app.shared.schemas.common import ReviewRecord
from app.shared.storage.base import Storage
from .schemas import ReviewDetail

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """Reviews between the two parties of a completed delivery"""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def submit_review(
        self,
        delivery_id: int,
        reviewer_id: int,
        reviewee_id: int,
        rating: int,
        comment: Optional[str] = None
    ) -> ReviewRecord:
        """
        Store a review and refresh the reviewee's aggregate rating.

        Checks run in this order: delivery exists and is delivered, reviewer
        took part in it, reviewee is the other party, reviewer has not
        reviewed this delivery yet, rating is an integer from 1 to 5.
        """
        delivery = self.storage.get_delivery(delivery_id)
        if delivery is None:
            raise NotFound(f"Delivery {delivery_id} not found")

        if delivery.status != "delivered":
            raise InvalidState("Can only review completed deliveries")

        is_sender = reviewer_id == delivery.sender_id
        is_carrier = reviewer_id == delivery.carrier_id
        if not is_sender and not is_carrier:
            raise Forbidden("Only participants in the delivery can leave reviews")

        other_party = delivery.carrier_id if is_sender else delivery.sender_id
        if reviewee_id != other_party:
            raise ValidationError.for_field("reviewee_id", "Reviewee must be the other party of the delivery")

        if self.storage.get_review(delivery_id, reviewer_id) is not None:
            raise Conflict("You have already reviewed this delivery")

        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError.for_field("rating", f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")

        # Insert and aggregate recomputation happen in one unit; a concurrent
        # duplicate that slipped past the check above shows up here as None
        review = self.storage.add_review(
            delivery_id, reviewer_id, reviewee_id, rating, comment, datetime.now(timezone.utc)
        )
        if review is None:
            raise Conflict("You have already reviewed this delivery")

        logger.info(f"⭐ Review {review.id}: user {reviewer_id} rated user {reviewee_id} {rating}/5 (delivery {delivery_id})")
        return review

    async def list_reviews_for(self, user_id: int) -> List[ReviewDetail]:
        """Reviews received by a user, newest first, with reviewer name and handle"""
        reviews = self.storage.list_reviews_for(user_id)
        reviewers = self.storage.get_users(r.reviewer_id for r in reviews)

        return [
            ReviewDetail(
                **review.model_dump(),
                reviewer=reviewers[review.reviewer_id].reviewer_info()
                if review.reviewer_id in reviewers else None
            )
            for review in reviews
        ]
