# app/modules/users/schemas.py
from app.shared.schemas.common import BaseResponse, PublicProfile

class ProfileResponse(BaseResponse):
    profile: PublicProfile
