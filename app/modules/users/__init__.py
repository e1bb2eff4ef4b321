# app/modules/users/__init__.py
"""
Users module - public profiles

- US001: Public profile (no credentials, no contact data)
- RV002: Reviews received by a user
"""

from .router import router
from .service import UserService

__all__ = [
    "router",
    "UserService"
]
