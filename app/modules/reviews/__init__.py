# app/modules/reviews/__init__.py
"""
Reviews module - ratings between sender and carrier

- RV001: Review the other party of a delivered delivery
- RV002: Reviews received by a user (see users module)

Architecture:
- router.py: FastAPI endpoints
- service.py: review rules and aggregate rating (ReviewService)
- schemas.py: Pydantic request/response models
"""

from .router import router
from .service import ReviewService

__all__ = [
    "router",
    "ReviewService"
]
