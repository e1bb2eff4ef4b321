# app/modules/deliveries/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query, status

from app.core.auth.dependencies import get_current_user
from app.core.dependencies import get_acceptance_policy, get_storage
from app.shared.schemas.common import UserRecord
from app.shared.storage.base import Storage
from .policy import AcceptancePolicy
from .service import DeliveryService
from .schemas import (
    DeliveryCreate, StatusUpdate, PackageSize, DeliveryStatus,
    DeliveryResponse, DeliveryListResponse
)

router = APIRouter()

@router.get("", response_model=DeliveryListResponse)
async def list_deliveries(
    status_filter: Optional[DeliveryStatus] = Query(None, alias="status"),
    pickup_location: Optional[str] = Query(None),
    drop_location: Optional[str] = Query(None),
    package_size: Optional[PackageSize] = Query(None),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """
    DL002: Browse deliveries

    **Filters (exact match, all optional):**
    - status: requested, accepted, picked, delivered
    - pickup_location / drop_location
    - package_size: small, medium, large

    No authentication required. Each delivery carries only the sender's
    public profile.
    """
    service = DeliveryService(storage, policy)
    deliveries = await service.list_deliveries({
        "status": status_filter,
        "pickup_location": pickup_location,
        "drop_location": drop_location,
        "package_size": package_size
    })
    return DeliveryListResponse(
        success=True,
        message="Deliveries",
        deliveries=deliveries,
        count=len(deliveries)
    )

@router.get("/mine/sender", response_model=DeliveryListResponse)
async def list_my_sent_deliveries(
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """DL005: Deliveries I requested, with the assigned carrier"""
    service = DeliveryService(storage, policy)
    deliveries = await service.list_for_sender(current_user.id)
    return DeliveryListResponse(
        success=True,
        message="Deliveries sent",
        deliveries=deliveries,
        count=len(deliveries)
    )

@router.get("/mine/carrier", response_model=DeliveryListResponse)
async def list_my_carried_deliveries(
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """DL006: Deliveries I accepted as carrier, with the sender"""
    service = DeliveryService(storage, policy)
    deliveries = await service.list_for_carrier(current_user.id)
    return DeliveryListResponse(
        success=True,
        message="Deliveries carried",
        deliveries=deliveries,
        count=len(deliveries)
    )

@router.get("/{delivery_id}", response_model=DeliveryResponse)
async def get_delivery(
    delivery_id: int = Path(..., description="Delivery ID"),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """DL003: Delivery details with sender and carrier public profiles"""
    service = DeliveryService(storage, policy)
    delivery = await service.get_delivery(delivery_id)
    return DeliveryResponse(success=True, message="Delivery", delivery=delivery)

@router.post("", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED)
async def create_delivery(
    delivery_data: DeliveryCreate,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """
    DL001: Request a delivery

    **Validations:**
    - package_size must be small, medium or large
    - package_weight (grams) and delivery_fee (minor units) must be positive
    - pickup/drop locations, date and time window are required

    The delivery starts in 'requested' status with no carrier.
    """
    service = DeliveryService(storage, policy)
    delivery = await service.create_delivery(current_user.id, delivery_data)
    return DeliveryResponse(success=True, message="Delivery requested", delivery=delivery)

@router.patch("/{delivery_id}/status", response_model=DeliveryResponse)
async def update_delivery_status(
    status_update: StatusUpdate,
    delivery_id: int = Path(..., description="Delivery ID"),
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    policy: AcceptancePolicy = Depends(get_acceptance_policy)
):
    """
    DL004: Move a delivery to its next stage

    **Transitions:**
    - accepted: from 'requested', by an eligible user other than the sender
    - picked: from 'accepted', by the assigned carrier
    - delivered: from 'picked', by the assigned carrier

    **Concurrency:**
    - Acceptance is a conditional update; if two carriers race, only the
      first one gets the delivery and the other receives an invalid
      transition error
    """
    service = DeliveryService(storage, policy)
    delivery = await service.transition_status(delivery_id, current_user.id, status_update.status)
    return DeliveryResponse(
        success=True,
        message=f"Delivery {status_update.status}",
        delivery=delivery
    )
