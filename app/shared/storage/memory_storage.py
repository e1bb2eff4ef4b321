# app/shared/storage/memory_storage.py
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional
import logging

from app.core.exceptions import Conflict, NotFound
from app.shared.schemas.common import (
    DeliveryRecord, ReviewRecord, UserCredentials, UserRecord
)
from .base import Storage, aggregate_rating, clean_filters

logger = logging.getLogger(__name__)


def _newest_first(records):
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class MemoryStorage(Storage):
    """In-process storage; every read and write runs under one lock"""

    def __init__(self):
        self._lock = RLock()
        self._users: Dict[int, UserRecord] = {}
        self._password_hashes: Dict[int, str] = {}
        self._deliveries: Dict[int, DeliveryRecord] = {}
        self._reviews: Dict[int, ReviewRecord] = {}
        self._next_ids = {"users": 1, "deliveries": 1, "reviews": 1}

    def open(self) -> None:
        logger.info("🗄️  Using in-memory storage")

    def close(self) -> None:
        with self._lock:
            self._users.clear()
            self._password_hashes.clear()
            self._deliveries.clear()
            self._reviews.clear()

    def _next_id(self, table: str) -> int:
        value = self._next_ids[table]
        self._next_ids[table] = value + 1
        return value

    # ==================== USERS ====================

    def create_user(self, username: str, password_hash: str, full_name: str, role: str) -> UserRecord:
        with self._lock:
            if any(user.username == username for user in self._users.values()):
                raise Conflict(f"Username '{username}' already exists")

            user = UserRecord(
                id=self._next_id("users"),
                username=username,
                full_name=full_name,
                role=role,
                rating=None,
                total_reviews=0,
                created_at=datetime.now(timezone.utc)
            )
            self._users[user.id] = user
            self._password_hashes[user.id] = password_hash
            return user.model_copy()

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_users(self, user_ids: Iterable[int]) -> Dict[int, UserRecord]:
        with self._lock:
            return {
                user_id: self._users[user_id].model_copy()
                for user_id in set(user_ids) if user_id in self._users
            }

    def get_credentials(self, username: str) -> Optional[UserCredentials]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return UserCredentials(
                        id=user.id,
                        username=user.username,
                        password_hash=self._password_hashes[user.id]
                    )
            return None

    # ==================== DELIVERIES ====================

    def create_delivery(self, sender_id: int, fields: Dict[str, Any], created_at: datetime) -> DeliveryRecord:
        with self._lock:
            delivery = DeliveryRecord(
                **fields,
                id=self._next_id("deliveries"),
                sender_id=sender_id,
                carrier_id=None,
                status="requested",
                created_at=created_at
            )
            self._deliveries[delivery.id] = delivery
            return delivery.model_copy()

    def get_delivery(self, delivery_id: int) -> Optional[DeliveryRecord]:
        with self._lock:
            delivery = self._deliveries.get(delivery_id)
            return delivery.model_copy() if delivery else None

    def list_deliveries(self, filters: Optional[Dict[str, Any]] = None) -> List[DeliveryRecord]:
        conditions = clean_filters(filters)
        with self._lock:
            matches = [
                delivery.model_copy() for delivery in self._deliveries.values()
                if all(getattr(delivery, key) == value for key, value in conditions.items())
            ]
        return _newest_first(matches)

    def list_deliveries_for_sender(self, sender_id: int) -> List[DeliveryRecord]:
        with self._lock:
            matches = [d.model_copy() for d in self._deliveries.values() if d.sender_id == sender_id]
        return _newest_first(matches)

    def list_deliveries_for_carrier(self, carrier_id: int) -> List[DeliveryRecord]:
        with self._lock:
            matches = [d.model_copy() for d in self._deliveries.values() if d.carrier_id == carrier_id]
        return _newest_first(matches)

    def claim_delivery(self, delivery_id: int, carrier_id: int) -> Optional[DeliveryRecord]:
        with self._lock:
            delivery = self._deliveries.get(delivery_id)
            if delivery is None or delivery.status != "requested" or delivery.carrier_id is not None:
                return None

            claimed = delivery.model_copy(update={"status": "accepted", "carrier_id": carrier_id})
            self._deliveries[delivery_id] = claimed
            return claimed.model_copy()

    def advance_delivery(
        self, delivery_id: int, carrier_id: int, from_status: str, to_status: str
    ) -> Optional[DeliveryRecord]:
        with self._lock:
            delivery = self._deliveries.get(delivery_id)
            if delivery is None or delivery.status != from_status or delivery.carrier_id != carrier_id:
                return None

            advanced = delivery.model_copy(update={"status": to_status})
            self._deliveries[delivery_id] = advanced
            return advanced.model_copy()

    # ==================== REVIEWS ====================

    def get_review(self, delivery_id: int, reviewer_id: int) -> Optional[ReviewRecord]:
        with self._lock:
            for review in self._reviews.values():
                if review.delivery_id == delivery_id and review.reviewer_id == reviewer_id:
                    return review.model_copy()
            return None

    def add_review(
        self,
        delivery_id: int,
        reviewer_id: int,
        reviewee_id: int,
        rating: int,
        comment: Optional[str],
        created_at: datetime
    ) -> Optional[ReviewRecord]:
        with self._lock:
            reviewee = self._users.get(reviewee_id)
            if reviewee is None:
                raise NotFound(f"User {reviewee_id} not found")

            if self.get_review(delivery_id, reviewer_id) is not None:
                return None

            review = ReviewRecord(
                id=self._next_id("reviews"),
                delivery_id=delivery_id,
                reviewer_id=reviewer_id,
                reviewee_id=reviewee_id,
                rating=rating,
                comment=comment,
                created_at=created_at
            )
            self._reviews[review.id] = review

            received = [r.rating for r in self._reviews.values() if r.reviewee_id == reviewee_id]
            self._users[reviewee_id] = reviewee.model_copy(update={
                "rating": aggregate_rating(sum(received), len(received)),
                "total_reviews": len(received)
            })
            return review.model_copy()

    def list_reviews_for(self, reviewee_id: int) -> List[ReviewRecord]:
        with self._lock:
            matches = [r.model_copy() for r in self._reviews.values() if r.reviewee_id == reviewee_id]
        return _newest_first(matches)
