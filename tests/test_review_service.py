import pytest

from app.core.exceptions import Conflict, Forbidden, InvalidState, NotFound, ValidationError
from app.shared.storage import aggregate_rating

from conftest import delivery_payload, run


@pytest.mark.parametrize("ratings_sum, count, expected", [
    (0, 0, None),
    (5, 1, 5),
    (9, 2, 5),     # 4.5 rounds up
    (5, 2, 3),     # 2.5 rounds up, not to even
    (7, 2, 4),
    (13, 3, 4),    # 4.33
    (11, 3, 4),    # 3.67
])
def test_aggregate_rating_rounds_half_up(ratings_sum, count, expected):
    assert aggregate_rating(ratings_sum, count) == expected


def test_scenario_review_after_delivery(storage, deliveries, reviews, users):
    sender, carrier = users["sender"], users["carrier"]
    delivery = run(deliveries.create_delivery(sender.id, delivery_payload()))
    assert delivery.status == "requested" and delivery.carrier_id is None

    for status in ("accepted", "picked", "delivered"):
        delivery = run(deliveries.transition_status(delivery.id, carrier.id, status))
    assert delivery.carrier_id == carrier.id

    review = run(reviews.submit_review(delivery.id, sender.id, carrier.id, 5, "Excellent service!"))
    assert review.rating == 5
    assert review.reviewee_id == carrier.id

    rated = storage.get_user(carrier.id)
    assert rated.rating == 5
    assert rated.total_reviews == 1

    # carrier reviews the sender once, a second attempt conflicts
    run(reviews.submit_review(delivery.id, carrier.id, sender.id, 4))
    with pytest.raises(Conflict):
        run(reviews.submit_review(delivery.id, carrier.id, sender.id, 3))

    assert storage.get_user(sender.id).total_reviews == 1
    assert storage.get_user(sender.id).rating == 4


@pytest.mark.parametrize("steps", [0, 1, 2])
def test_review_requires_delivered(deliveries, reviews, users, steps):
    sender, carrier = users["sender"], users["carrier"]
    delivery = run(deliveries.create_delivery(sender.id, delivery_payload()))
    for status in ("accepted", "picked")[:steps]:
        run(deliveries.transition_status(delivery.id, carrier.id, status))

    with pytest.raises(InvalidState):
        run(reviews.submit_review(delivery.id, sender.id, carrier.id, 5))


def test_review_missing_delivery(reviews, users):
    with pytest.raises(NotFound):
        run(reviews.submit_review(12345, users["sender"].id, users["carrier"].id, 5))


def test_outsider_cannot_review(reviews, users, make_delivered):
    delivery = make_delivered(users["sender"].id, users["carrier"].id)

    with pytest.raises(Forbidden):
        run(reviews.submit_review(delivery.id, users["both"].id, users["carrier"].id, 5))


def test_reviewee_must_be_other_party(reviews, users, make_delivered):
    sender, carrier = users["sender"], users["carrier"]
    delivery = make_delivered(sender.id, carrier.id)

    with pytest.raises(ValidationError) as exc_info:
        run(reviews.submit_review(delivery.id, sender.id, sender.id, 5))
    assert exc_info.value.errors[0]["path"] == "reviewee_id"

    with pytest.raises(ValidationError):
        run(reviews.submit_review(delivery.id, carrier.id, users["both"].id, 5))


@pytest.mark.parametrize("rating", [0, 6, -1, 4.5, True, "5"])
def test_rating_must_be_integer_between_1_and_5(storage, reviews, users, make_delivered, rating):
    sender, carrier = users["sender"], users["carrier"]
    delivery = make_delivered(sender.id, carrier.id)

    with pytest.raises(ValidationError) as exc_info:
        run(reviews.submit_review(delivery.id, sender.id, carrier.id, rating))
    assert exc_info.value.errors[0]["path"] == "rating"

    assert storage.get_review(delivery.id, sender.id) is None
    assert storage.get_user(carrier.id).total_reviews == 0


def test_duplicate_is_reported_before_bad_rating(reviews, users, make_delivered):
    sender, carrier = users["sender"], users["carrier"]
    delivery = make_delivered(sender.id, carrier.id)
    run(reviews.submit_review(delivery.id, sender.id, carrier.id, 4))

    with pytest.raises(Conflict):
        run(reviews.submit_review(delivery.id, sender.id, carrier.id, 9))


def test_aggregate_over_many_reviews(storage, reviews, users, make_delivered):
    carrier = users["carrier"]
    ratings = [5, 4, 4, 2]
    reviewers = [users["sender"], users["both"], users["sender"], users["both"]]

    for reviewer, rating in zip(reviewers, ratings):
        delivery = make_delivered(reviewer.id, carrier.id)
        run(reviews.submit_review(delivery.id, reviewer.id, carrier.id, rating))

    rated = storage.get_user(carrier.id)
    assert rated.total_reviews == len(ratings)
    assert rated.rating == aggregate_rating(sum(ratings), len(ratings)) == 4  # 3.75


def test_list_reviews_for_user(reviews, users, make_delivered):
    carrier = users["carrier"]
    first = make_delivered(users["sender"].id, carrier.id)
    second = make_delivered(users["both"].id, carrier.id)
    run(reviews.submit_review(first.id, users["sender"].id, carrier.id, 5, "Great"))
    run(reviews.submit_review(second.id, users["both"].id, carrier.id, 3))
    run(reviews.submit_review(first.id, carrier.id, users["sender"].id, 4))

    received = run(reviews.list_reviews_for(carrier.id))

    assert [r.delivery_id for r in received] == [second.id, first.id]
    assert received[0].reviewer.username == "bob_both"
    assert set(received[1].reviewer.model_dump()) == {"id", "username", "full_name"}
    assert received[1].comment == "Great"

    assert run(reviews.list_reviews_for(users["other_carrier"].id)) == []
