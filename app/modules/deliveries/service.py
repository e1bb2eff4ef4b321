# app/modules/deliveries/service.py
from typing import Any, Dict, List, Mapping, Optional, Union
from datetime import datetime, timezone
import logging

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import (
    DomainError, Forbidden, InvalidTransition, NotFound, ValidationError
)
from app.shared.database.models import DELIVERY_STATUSES
from app.shared.schemas.common import DeliveryRecord
from app.shared.storage.base import Storage
from .policy import AcceptancePolicy
from .schemas import DeliveryCreate, DeliveryDetail

logger = logging.getLogger(__name__)

# target status -> status the delivery must currently be in
REQUIRED_SOURCE_STATUS = {
    "accepted": "requested",
    "picked": "accepted",
    "delivered": "picked",
}


class DeliveryService:
    """Delivery lifecycle: requested -> accepted -> picked -> delivered"""

    def __init__(self, storage: Storage, acceptance_policy: Optional[AcceptancePolicy] = None):
        self.storage = storage
        self.acceptance_policy = acceptance_policy or AcceptancePolicy.from_roles()

    async def create_delivery(
        self, sender_id: int, fields: Union[DeliveryCreate, Mapping[str, Any]]
    ) -> DeliveryDetail:
        """Create a new delivery request in 'requested' status"""

        if isinstance(fields, DeliveryCreate):
            payload = fields
        else:
            try:
                payload = DeliveryCreate.model_validate(dict(fields))
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e)

        sender = self.storage.get_user(sender_id)
        if sender is None:
            raise NotFound(f"User {sender_id} not found")

        delivery = self.storage.create_delivery(sender_id, payload.model_dump(), datetime.now(timezone.utc))
        logger.info(
            f"📦 Delivery {delivery.id} created by user {sender_id}: "
            f"{delivery.pickup_location} → {delivery.drop_location} ({delivery.package_size})"
        )
        return DeliveryDetail(**delivery.model_dump(), sender=sender.public_profile())

    async def list_deliveries(self, filters: Optional[Dict[str, Any]] = None) -> List[DeliveryDetail]:
        """Public listing, newest first, with the sender's public profile"""
        deliveries = self.storage.list_deliveries(filters)
        return self._with_profiles(deliveries, sender=True, carrier=False)

    async def get_delivery(self, delivery_id: int) -> DeliveryDetail:
        delivery = self._load(delivery_id)
        return self._with_profiles([delivery], sender=True, carrier=True)[0]

    async def list_for_sender(self, user_id: int) -> List[DeliveryDetail]:
        """Deliveries sent by the user, with the carrier (if any)"""
        deliveries = self.storage.list_deliveries_for_sender(user_id)
        return self._with_profiles(deliveries, sender=False, carrier=True)

    async def list_for_carrier(self, user_id: int) -> List[DeliveryDetail]:
        """Deliveries carried by the user, with the sender"""
        deliveries = self.storage.list_deliveries_for_carrier(user_id)
        return self._with_profiles(deliveries, sender=True, carrier=False)

    async def transition_status(self, delivery_id: int, actor_id: int, target_status: str) -> DeliveryDetail:
        """Move a delivery one stage forward on behalf of actor_id"""

        delivery = self._load(delivery_id)

        if target_status not in REQUIRED_SOURCE_STATUS:
            if target_status in DELIVERY_STATUSES:
                raise self._reject(
                    InvalidTransition(f"Cannot move a delivery to '{target_status}'"),
                    delivery, actor_id
                )
            raise ValidationError.for_field("status", f"Unknown status '{target_status}'")

        if target_status == "accepted":
            updated = self._accept(delivery, actor_id)
        else:
            updated = self._advance(delivery, actor_id, target_status)

        logger.info(
            f"🚚 Delivery {delivery_id}: {delivery.status} → {updated.status} (actor {actor_id})"
        )
        return self._with_profiles([updated], sender=True, carrier=True)[0]

    def _accept(self, delivery: DeliveryRecord, actor_id: int) -> DeliveryRecord:
        if delivery.status != "requested":
            raise self._reject(
                InvalidTransition("Can only accept deliveries with 'requested' status"),
                delivery, actor_id
            )

        if actor_id == delivery.sender_id:
            raise self._reject(
                Forbidden("Senders cannot accept their own delivery"), delivery, actor_id
            )

        actor = self.storage.get_user(actor_id)
        if actor is None or not self.acceptance_policy.allows(actor.role):
            role = actor.role if actor else "unknown"
            raise self._reject(
                Forbidden(f"Role '{role}' is not allowed to accept deliveries"), delivery, actor_id
            )

        # Conditional update: only one concurrent claimant can win
        claimed = self.storage.claim_delivery(delivery.id, actor_id)
        if claimed is None:
            raise self._reject(
                InvalidTransition("Delivery is no longer available for acceptance"), delivery, actor_id
            )
        return claimed

    def _advance(self, delivery: DeliveryRecord, actor_id: int, target_status: str) -> DeliveryRecord:
        if actor_id not in (delivery.sender_id, delivery.carrier_id):
            raise self._reject(
                Forbidden("Not associated with this delivery"), delivery, actor_id
            )

        required = REQUIRED_SOURCE_STATUS[target_status]
        if delivery.status != required:
            raise self._reject(
                InvalidTransition(
                    f"Can only mark as {target_status} when delivery is {required}"
                ),
                delivery, actor_id
            )

        if actor_id != delivery.carrier_id:
            raise self._reject(
                Forbidden(f"Only the carrier can mark a delivery as {target_status}"), delivery, actor_id
            )

        advanced = self.storage.advance_delivery(delivery.id, actor_id, required, target_status)
        if advanced is None:
            raise self._reject(
                InvalidTransition("Delivery status changed while updating"), delivery, actor_id
            )
        return advanced

    def _load(self, delivery_id: int) -> DeliveryRecord:
        delivery = self.storage.get_delivery(delivery_id)
        if delivery is None:
            raise NotFound(f"Delivery {delivery_id} not found")
        return delivery

    def _with_profiles(self, deliveries: List[DeliveryRecord], sender: bool, carrier: bool) -> List[DeliveryDetail]:
        user_ids = set()
        for d in deliveries:
            if sender:
                user_ids.add(d.sender_id)
            if carrier and d.carrier_id is not None:
                user_ids.add(d.carrier_id)

        users = self.storage.get_users(user_ids)

        details = []
        for d in deliveries:
            sender_user = users.get(d.sender_id) if sender else None
            carrier_user = users.get(d.carrier_id) if carrier and d.carrier_id is not None else None
            details.append(DeliveryDetail(
                **d.model_dump(),
                sender=sender_user.public_profile() if sender_user else None,
                carrier=carrier_user.public_profile() if carrier_user else None
            ))
        return details

    @staticmethod
    def _reject(error: DomainError, delivery: DeliveryRecord, actor_id: int) -> DomainError:
        logger.warning(
            f"⚠️ Delivery {delivery.id} ({delivery.status}): rejected for actor {actor_id} - {error.message}"
        )
        return error
