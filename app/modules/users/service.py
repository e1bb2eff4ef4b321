# app/modules/users/service.py
from app.core.exceptions import NotFound
from app.shared.schemas.common import PublicProfile
from app.shared.storage.base import Storage


class UserService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def get_public_profile(self, user_id: int) -> PublicProfile:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user.public_profile()
