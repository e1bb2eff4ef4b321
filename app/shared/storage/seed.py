# app/shared/storage/seed.py
"""Demo accounts and deliveries for local development"""
import logging

from app.core.auth.service import AuthService
from app.modules.deliveries.policy import AcceptancePolicy
from app.modules.deliveries.service import DeliveryService
from app.modules.reviews.service import ReviewService
from .base import Storage

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"username": "john_sender", "full_name": "John Sender", "role": "sender"},
    {"username": "alice_carrier", "full_name": "Alice Carrier", "role": "carrier"},
    {"username": "bob_both", "full_name": "Bob Both", "role": "both"},
]


async def seed_demo_data(storage: Storage) -> bool:
    """Load the demo dataset once; returns False if it was already there"""

    if storage.get_credentials(DEMO_USERS[0]["username"]) is not None:
        logger.info("✅ Demo data already present")
        return False

    password_hash = AuthService.get_password_hash(DEMO_PASSWORD)
    john, alice, bob = [
        storage.create_user(password_hash=password_hash, **user_data)
        for user_data in DEMO_USERS
    ]

    deliveries = DeliveryService(storage, AcceptancePolicy.from_roles())
    reviews = ReviewService(storage)

    electronics = await deliveries.create_delivery(john.id, {
        "pickup_location": "Pune",
        "drop_location": "Mumbai",
        "package_size": "medium",
        "package_weight": 3500,
        "description": "Electronics",
        "special_instructions": "Handle with care",
        "preferred_delivery_date": "2023-06-22",
        "preferred_delivery_time": "Before 6:00 PM",
        "delivery_fee": 30000
    })
    clothes = await deliveries.create_delivery(bob.id, {
        "pickup_location": "Mumbai",
        "drop_location": "Bangalore",
        "package_size": "small",
        "package_weight": 1000,
        "description": "Clothes",
        "preferred_delivery_date": "2023-06-24",
        "preferred_delivery_time": "Before 2:00 PM",
        "delivery_fee": 50000
    })
    await deliveries.create_delivery(john.id, {
        "pickup_location": "Bangalore",
        "drop_location": "Pune",
        "package_size": "large",
        "package_weight": 8000,
        "description": "Books",
        "preferred_delivery_date": "2023-06-23",
        "preferred_delivery_time": "Before 8:00 PM",
        "delivery_fee": 60000
    })

    for target in ("accepted", "picked", "delivered"):
        await deliveries.transition_status(electronics.id, alice.id, target)
    await deliveries.transition_status(clothes.id, alice.id, "accepted")

    await reviews.submit_review(electronics.id, john.id, alice.id, 5, "Excellent service!")

    logger.info(f"🎉 Demo data loaded: {len(DEMO_USERS)} users, 3 deliveries (password '{DEMO_PASSWORD}')")
    return True
