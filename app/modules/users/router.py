# app/modules/users/router.py
from fastapi import APIRouter, Depends, Path

from app.core.dependencies import get_storage
from app.modules.reviews.schemas import ReviewListResponse
from app.modules.reviews.service import ReviewService
from app.shared.storage.base import Storage
from .service import UserService
from .schemas import ProfileResponse

router = APIRouter()

@router.get("/{user_id}/profile", response_model=ProfileResponse)
async def get_user_profile(
    user_id: int = Path(..., description="User ID"),
    storage: Storage = Depends(get_storage)
):
    """
    US001: Public profile

    Only id, username, full name, role, rating and review count are exposed.
    """
    service = UserService(storage)
    profile = await service.get_public_profile(user_id)
    return ProfileResponse(success=True, message="User profile", profile=profile)

@router.get("/{user_id}/reviews", response_model=ReviewListResponse)
async def get_user_reviews(
    user_id: int = Path(..., description="User ID"),
    storage: Storage = Depends(get_storage)
):
    """RV002: Reviews received by the user, newest first"""
    service = ReviewService(storage)
    reviews = await service.list_reviews_for(user_id)
    return ReviewListResponse(
        success=True,
        message="Reviews received",
        reviews=reviews,
        count=len(reviews)
    )
