from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal

UserRole = Literal["sender", "carrier", "both"]

class UserRegister(BaseModel):
    """Schema for account registration"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "username": "alice_carrier",
                "password": "password123",
                "full_name": "Alice Carrier",
                "role": "carrier"
            }
        }
    )

    username: str = Field(..., min_length=3, max_length=255, description="Unique handle")
    password: str = Field(..., min_length=6, description="Account password")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")
    role: UserRole = Field("both", description="sender, carrier or both")

class UserLogin(BaseModel):
    """Schema for JSON login"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "john_sender",
                "password": "password123"
            }
        }
    )

    username: str = Field(..., description="Username")
    password: str = Field(..., min_length=6, description="Password")

class UserResponse(BaseModel):
    """Authenticated user as returned to the client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    role: str
    rating: Optional[int] = None
    total_reviews: int = 0

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
