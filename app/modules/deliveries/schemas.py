# app/modules/deliveries/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from app.shared.schemas.common import BaseResponse, DeliveryRecord, PublicProfile

PackageSize = Literal["small", "medium", "large"]
DeliveryStatus = Literal["requested", "accepted", "picked", "delivered"]

class DeliveryCreate(BaseModel):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "pickup_location": "Pune",
                "drop_location": "Mumbai",
                "package_size": "medium",
                "package_weight": 3500,
                "description": "Electronics",
                "special_instructions": "Handle with care",
                "preferred_delivery_date": "2023-06-22",
                "preferred_delivery_time": "Before 6:00 PM",
                "delivery_fee": 30000
            }
        }
    )

    pickup_location: str = Field(..., min_length=1, description="Pickup location name")
    drop_location: str = Field(..., min_length=1, description="Drop location name")
    package_size: PackageSize = Field(..., description="small, medium, large")
    package_weight: int = Field(..., gt=0, strict=True, description="Weight in grams")
    description: Optional[str] = Field(None, description="What is inside the package")
    special_instructions: Optional[str] = Field(None, description="Handling notes for the carrier")
    preferred_delivery_date: str = Field(..., min_length=1, description="Preferred delivery date")
    preferred_delivery_time: str = Field(..., min_length=1, description="Preferred time window")
    delivery_fee: int = Field(..., gt=0, strict=True, description="Fee in minor currency units")

class StatusUpdate(BaseModel):
    status: DeliveryStatus = Field(..., description="Target status: accepted, picked, delivered")

class DeliveryDetail(DeliveryRecord):
    """Delivery with the public profile of the parties involved"""
    sender: Optional[PublicProfile] = None
    carrier: Optional[PublicProfile] = None

class DeliveryResponse(BaseResponse):
    delivery: DeliveryDetail

class DeliveryListResponse(BaseResponse):
    deliveries: List[DeliveryDetail]
    count: int
