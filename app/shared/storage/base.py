# app/shared/storage/base.py
"""
Persistence gateway contract shared by the delivery and rating engines.

Implementations return the plain records from ``app.shared.schemas.common``;
ORM objects and credential hashes never cross this boundary (except
``get_credentials`` which exists only for login).

Two operations are atomic by contract:

- ``claim_delivery`` / ``advance_delivery``: compare-and-set on the delivery
  status. They return ``None`` when the expected current state no longer
  holds, so concurrent callers cannot both win.
- ``add_review``: inserts the review and recomputes the reviewee's aggregate
  rating in one unit. Returns ``None`` if a review by the same reviewer for
  the same delivery already exists at the time the unit runs.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from app.shared.schemas.common import (
    DeliveryRecord, ReviewRecord, UserCredentials, UserRecord
)

DELIVERY_FILTER_FIELDS = ("status", "pickup_location", "drop_location", "package_size")


def aggregate_rating(ratings_sum: int, count: int) -> Optional[int]:
    """Mean rating rounded half away from zero; None when there are no reviews"""
    if not count:
        return None
    mean = Decimal(int(ratings_sum)) / Decimal(int(count))
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clean_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only known filter fields that carry a value"""
    if not filters:
        return {}
    return {
        key: value for key, value in filters.items()
        if key in DELIVERY_FILTER_FIELDS and value not in (None, "")
    }


class Storage(ABC):

    def open(self) -> None:
        """Acquire resources; called once at application startup"""

    def close(self) -> None:
        """Release resources; called once at shutdown"""

    # ==================== USERS ====================

    @abstractmethod
    def create_user(self, username: str, password_hash: str, full_name: str, role: str) -> UserRecord:
        """Raises Conflict if the username is taken"""

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_users(self, user_ids: Iterable[int]) -> Dict[int, UserRecord]:
        ...

    @abstractmethod
    def get_credentials(self, username: str) -> Optional[UserCredentials]:
        ...

    # ==================== DELIVERIES ====================

    @abstractmethod
    def create_delivery(self, sender_id: int, fields: Dict[str, Any], created_at: datetime) -> DeliveryRecord:
        ...

    @abstractmethod
    def get_delivery(self, delivery_id: int) -> Optional[DeliveryRecord]:
        ...

    @abstractmethod
    def list_deliveries(self, filters: Optional[Dict[str, Any]] = None) -> List[DeliveryRecord]:
        """Exact-match conjunction of DELIVERY_FILTER_FIELDS, newest first"""

    @abstractmethod
    def list_deliveries_for_sender(self, sender_id: int) -> List[DeliveryRecord]:
        ...

    @abstractmethod
    def list_deliveries_for_carrier(self, carrier_id: int) -> List[DeliveryRecord]:
        ...

    @abstractmethod
    def claim_delivery(self, delivery_id: int, carrier_id: int) -> Optional[DeliveryRecord]:
        """status requested -> accepted and carrier_id set, in one conditional update"""

    @abstractmethod
    def advance_delivery(
        self, delivery_id: int, carrier_id: int, from_status: str, to_status: str
    ) -> Optional[DeliveryRecord]:
        """status from_status -> to_status, only while carrier_id matches"""

    # ==================== REVIEWS ====================

    @abstractmethod
    def get_review(self, delivery_id: int, reviewer_id: int) -> Optional[ReviewRecord]:
        ...

    @abstractmethod
    def add_review(
        self,
        delivery_id: int,
        reviewer_id: int,
        reviewee_id: int,
        rating: int,
        comment: Optional[str],
        created_at: datetime
    ) -> Optional[ReviewRecord]:
        ...

    @abstractmethod
    def list_reviews_for(self, reviewee_id: int) -> List[ReviewRecord]:
        """Reviews received by the user, newest first"""
