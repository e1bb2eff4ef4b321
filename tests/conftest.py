import asyncio

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.main import create_app
from app.modules.deliveries import AcceptancePolicy, DeliveryService
from app.modules.reviews import ReviewService
from app.shared.storage import DatabaseStorage, MemoryStorage


def run(coro):
    """Drive a service coroutine to completion"""
    return asyncio.run(coro)


def delivery_payload(**overrides):
    payload = {
        "pickup_location": "Pune",
        "drop_location": "Mumbai",
        "package_size": "medium",
        "package_weight": 3500,
        "description": "Electronics",
        "preferred_delivery_date": "2023-06-22",
        "preferred_delivery_time": "Before 6:00 PM",
        "delivery_fee": 30000,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(params=["memory", "database"])
def storage(request, tmp_path):
    if request.param == "memory":
        store = MemoryStorage()
    else:
        store = DatabaseStorage(Settings(
            storage_backend="database",
            database_url=f"sqlite:///{tmp_path / 'parcel_test.db'}",
        ))
    store.open()
    yield store
    store.close()


@pytest.fixture
def memory_storage():
    store = MemoryStorage()
    store.open()
    yield store
    store.close()


@pytest.fixture
def users(storage):
    """sender (role sender), two carriers, one 'both' user"""
    return {
        "sender": storage.create_user("john_sender", "hash", "John Sender", "sender"),
        "carrier": storage.create_user("alice_carrier", "hash", "Alice Carrier", "carrier"),
        "other_carrier": storage.create_user("carl_carrier", "hash", "Carl Carrier", "carrier"),
        "both": storage.create_user("bob_both", "hash", "Bob Both", "both"),
    }


@pytest.fixture
def deliveries(storage):
    return DeliveryService(storage, AcceptancePolicy.from_roles())


@pytest.fixture
def reviews(storage):
    return ReviewService(storage)


@pytest.fixture
def make_delivered(deliveries):
    """Create a delivery and walk it to 'delivered'"""
    def _make(sender_id, carrier_id, **overrides):
        delivery = run(deliveries.create_delivery(sender_id, delivery_payload(**overrides)))
        for status in ("accepted", "picked", "delivered"):
            delivery = run(deliveries.transition_status(delivery.id, carrier_id, status))
        return delivery
    return _make


@pytest.fixture
def client():
    app = create_app(Settings(storage_backend="memory", seed_demo_data=False))
    with TestClient(app) as test_client:
        yield test_client
