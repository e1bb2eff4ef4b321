# app/shared/schemas/common.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class BaseResponse(BaseModel):
    success: bool
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)

class ErrorDetail(BaseModel):
    path: str
    message: str

class ErrorResponse(BaseResponse):
    success: bool = False
    error_code: Optional[str] = None
    errors: List[ErrorDetail] = []


# =====================================================
# RECORDS RETURNED BY THE STORAGE GATEWAY
# =====================================================

class PublicProfile(BaseModel):
    """User fields that are safe to show to anyone"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    rating: Optional[int] = None
    total_reviews: int = 0
    role: str

class ReviewerInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str

class UserRecord(PublicProfile):
    """Full user row minus the credential secret"""
    created_at: Optional[datetime] = None

    def public_profile(self) -> PublicProfile:
        return PublicProfile(**self.model_dump(include=set(PublicProfile.model_fields)))

    def reviewer_info(self) -> ReviewerInfo:
        return ReviewerInfo(id=self.id, username=self.username, full_name=self.full_name)

class UserCredentials(BaseModel):
    """Only used by login; the hash never leaves the auth layer"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    password_hash: str

class DeliveryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    carrier_id: Optional[int] = None
    pickup_location: str
    drop_location: str
    package_size: str
    package_weight: int
    description: Optional[str] = None
    special_instructions: Optional[str] = None
    preferred_delivery_date: str
    preferred_delivery_time: str
    status: str
    delivery_fee: int
    created_at: datetime

class ReviewRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    delivery_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
