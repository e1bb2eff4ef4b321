from datetime import datetime, timezone
import threading

import pytest

from app.config.settings import Settings
from app.core.exceptions import Conflict, InvalidTransition, StorageError
from app.shared.database.models import Review
from app.modules.deliveries import AcceptancePolicy, DeliveryService
from app.modules.reviews import ReviewService
from app.shared.storage import DatabaseStorage, aggregate_rating

from conftest import delivery_payload, run


def _race(workers, target):
    """Start all workers at the same moment and collect results/errors"""
    barrier = threading.Barrier(len(workers))
    results, errors = [], []
    lock = threading.Lock()

    def worker(arg):
        barrier.wait()
        try:
            value = target(arg)
        except Exception as e:  # collected for assertions below
            with lock:
                errors.append(e)
        else:
            with lock:
                results.append(value)

    threads = [threading.Thread(target=worker, args=(arg,)) for arg in workers]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results, errors


def test_concurrent_accepts_have_one_winner(memory_storage):
    sender = memory_storage.create_user("sender", "hash", "Sender", "sender")
    carriers = [
        memory_storage.create_user(f"carrier_{i}", "hash", f"Carrier {i}", "carrier")
        for i in range(8)
    ]
    service = DeliveryService(memory_storage, AcceptancePolicy.from_roles())
    delivery = run(service.create_delivery(sender.id, delivery_payload()))

    results, errors = _race(
        [c.id for c in carriers],
        lambda carrier_id: run(service.transition_status(delivery.id, carrier_id, "accepted"))
    )

    assert len(results) == 1
    assert len(errors) == len(carriers) - 1
    assert all(isinstance(e, InvalidTransition) for e in errors)

    final = run(service.get_delivery(delivery.id))
    assert final.status == "accepted"
    assert final.carrier_id == results[0].carrier_id


def test_claim_is_conditional(storage, users, deliveries):
    delivery = run(deliveries.create_delivery(users["sender"].id, delivery_payload()))

    first = storage.claim_delivery(delivery.id, users["carrier"].id)
    second = storage.claim_delivery(delivery.id, users["other_carrier"].id)

    assert first is not None and first.carrier_id == users["carrier"].id
    assert second is None
    assert storage.get_delivery(delivery.id).carrier_id == users["carrier"].id


def test_advance_requires_matching_carrier(storage, users, deliveries):
    delivery = run(deliveries.create_delivery(users["sender"].id, delivery_payload()))
    storage.claim_delivery(delivery.id, users["carrier"].id)

    assert storage.advance_delivery(delivery.id, users["other_carrier"].id, "accepted", "picked") is None
    assert storage.advance_delivery(delivery.id, users["carrier"].id, "picked", "delivered") is None
    assert storage.advance_delivery(delivery.id, users["carrier"].id, "accepted", "picked").status == "picked"


def test_concurrent_reviews_keep_aggregate_consistent(memory_storage):
    carrier = memory_storage.create_user("carrier", "hash", "Carrier", "carrier")
    senders = [
        memory_storage.create_user(f"sender_{i}", "hash", f"Sender {i}", "sender")
        for i in range(6)
    ]
    deliveries = DeliveryService(memory_storage, AcceptancePolicy.from_roles())
    reviews = ReviewService(memory_storage)

    jobs = []
    for index, sender in enumerate(senders):
        delivery = run(deliveries.create_delivery(sender.id, delivery_payload()))
        for status in ("accepted", "picked", "delivered"):
            run(deliveries.transition_status(delivery.id, carrier.id, status))
        jobs.append((delivery.id, sender.id, index % 5 + 1))

    results, errors = _race(
        jobs,
        lambda job: run(reviews.submit_review(job[0], job[1], carrier.id, job[2]))
    )

    assert errors == []
    assert len(results) == len(jobs)

    ratings = [job[2] for job in jobs]
    rated = memory_storage.get_user(carrier.id)
    assert rated.total_reviews == len(ratings)
    assert rated.rating == aggregate_rating(sum(ratings), len(ratings))


@pytest.mark.parametrize("attempts", [8])
def test_concurrent_duplicate_reviews_store_one(storage, attempts):
    sender = storage.create_user("sender", "hash", "Sender", "sender")
    carrier = storage.create_user("carrier", "hash", "Carrier", "carrier")
    deliveries = DeliveryService(storage, AcceptancePolicy.from_roles())
    reviews = ReviewService(storage)

    delivery = run(deliveries.create_delivery(sender.id, delivery_payload()))
    for status in ("accepted", "picked", "delivered"):
        run(deliveries.transition_status(delivery.id, carrier.id, status))

    results, errors = _race(
        list(range(attempts)),
        lambda _: run(reviews.submit_review(delivery.id, sender.id, carrier.id, 5))
    )

    assert len(results) == 1
    assert len(errors) == attempts - 1
    assert all(isinstance(e, Conflict) for e in errors)

    rated = storage.get_user(carrier.id)
    assert rated.total_reviews == 1
    assert rated.rating == 5
    assert len(storage.list_reviews_for(carrier.id)) == 1


def test_reviews_table_rejects_duplicate_pair(tmp_path):
    store = DatabaseStorage(Settings(
        storage_backend="database",
        database_url=f"sqlite:///{tmp_path / 'unique.db'}",
    ))
    store.open()
    try:
        sender = store.create_user("sender", "hash", "Sender", "sender")
        carrier = store.create_user("carrier", "hash", "Carrier", "carrier")
        delivery = store.create_delivery(sender.id, delivery_payload(), datetime.now(timezone.utc))

        def insert_review(db):
            db.add(Review(
                delivery_id=delivery.id, reviewer_id=sender.id, reviewee_id=carrier.id,
                rating=5, created_at=datetime.now(timezone.utc)
            ))
            db.flush()

        with store.session_scope() as db:
            insert_review(db)
        with pytest.raises(StorageError):
            with store.session_scope() as db:
                insert_review(db)

        assert len(store.list_reviews_for(carrier.id)) == 1
    finally:
        store.close()
