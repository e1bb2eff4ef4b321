# app/modules/reviews/schemas.py
from pydantic import BaseModel, Field
from typing import Optional, List
from app.shared.schemas.common import BaseResponse, ReviewRecord, ReviewerInfo

class ReviewCreate(BaseModel):
    delivery_id: int = Field(..., description="Delivered delivery being reviewed")
    reviewee_id: int = Field(..., description="The other party of the delivery")
    rating: int = Field(..., strict=True, description="1 to 5")
    comment: Optional[str] = Field(None, max_length=1000, description="Optional comment")

class ReviewDetail(ReviewRecord):
    reviewer: Optional[ReviewerInfo] = None

class ReviewResponse(BaseResponse):
    review: ReviewRecord

class ReviewListResponse(BaseResponse):
    reviews: List[ReviewDetail]
    count: int
