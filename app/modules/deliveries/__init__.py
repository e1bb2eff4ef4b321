# app/modules/deliveries/__init__.py
"""
Deliveries module - delivery lifecycle

- DL001: Request a delivery (sender)
- DL002: Browse deliveries with filters (public)
- DL003: Delivery details
- DL004: Status transitions requested -> accepted -> picked -> delivered
- DL005: Deliveries I sent
- DL006: Deliveries I carry

Architecture:
- router.py: FastAPI endpoints
- service.py: lifecycle rules (DeliveryService)
- policy.py: who may accept a delivery (AcceptancePolicy)
- schemas.py: Pydantic request/response models
"""

from .router import router
from .service import DeliveryService
from .policy import AcceptancePolicy

__all__ = [
    "router",
    "DeliveryService",
    "AcceptancePolicy"
]
