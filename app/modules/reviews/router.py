# app/modules/reviews/router.py
from fastapi import APIRouter, Depends, status

from app.core.auth.dependencies import get_current_user
from app.core.dependencies import get_storage
from app.shared.schemas.common import UserRecord
from app.shared.storage.base import Storage
from .service import ReviewService
from .schemas import ReviewCreate, ReviewResponse

router = APIRouter()

@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """
    RV001: Rate the other party of a delivered delivery

    **Rules:**
    - Delivery must be in 'delivered' status
    - Only the sender or the carrier can review, and only each other
    - One review per delivery and reviewer
    - Rating from 1 to 5

    The reviewee's rating becomes the rounded mean of every rating received.
    """
    service = ReviewService(storage)
    review = await service.submit_review(
        review_data.delivery_id,
        current_user.id,
        review_data.reviewee_id,
        review_data.rating,
        review_data.comment
    )
    return ReviewResponse(success=True, message="Review submitted", review=review)
