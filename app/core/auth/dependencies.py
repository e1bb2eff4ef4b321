from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.auth.service import AuthService
from app.config.settings import Settings
from app.core.dependencies import get_settings, get_storage
from app.shared.schemas.common import UserRecord
from app.shared.storage.base import Storage

security = HTTPBearer()

class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
) -> UserRecord:
    """Resolve the bearer token into the acting user"""

    payload = AuthService.verify_token(credentials.credentials, config)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("user_id")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    user = storage.get_user(int(user_id))
    if user is None:
        raise AuthenticationError("User not found")

    return user
