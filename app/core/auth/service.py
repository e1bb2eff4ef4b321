from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext
from app.config.settings import Settings, settings

logger = logging.getLogger(__name__)

# Password context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

class AuthService:
    """Password hashing and JWT handling"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        try:
            # bcrypt only looks at the first 72 bytes
            encoded_password = plain_password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
            return pwd_context.verify(encoded_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification error: {str(e)}")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        encoded_password = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
        return pwd_context.hash(encoded_password)

    @staticmethod
    def create_access_token(
        data: dict, expires_delta: Optional[timedelta] = None, config: Optional[Settings] = None
    ) -> str:
        config = config or settings
        to_encode = data.copy()

        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=config.access_token_expire_minutes)

        to_encode.update({"exp": expire})

        if "user_id" not in to_encode:
            raise ValueError("user_id is required in the token")

        return jwt.encode(to_encode, config.secret_key, algorithm=config.algorithm)

    @staticmethod
    def verify_token(token: str, config: Optional[Settings] = None) -> Optional[dict]:
        """Decode a token; None if invalid or expired"""
        config = config or settings
        try:
            return jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
        except JWTError:
            return None
