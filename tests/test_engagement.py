"""
Unit tests for likes and reviews on the place screen.
"""

import asyncio

import pytest

from touristguide.controllers import PlaceEngagementController
from touristguide.errors import AccessDeniedError, ValidationError
from touristguide.utils.responses import HardFail, SoftFail
from tests.conftest import envelope, place_payload, review_payload


@pytest.fixture
def screen(gateway, session, notifier):
    return PlaceEngagementController(gateway, session, "p1", notifier)


def like(is_liked, count, message=None):
    return envelope({"isLiked": is_liked, "likesCount": count}, message=message)


async def test_load_fetches_place_reviews_and_like(screen, gateway):
    gateway.get_place.return_value = envelope(place_payload("p1", likesCount=7))
    gateway.get_reviews.return_value = envelope([review_payload("r1"), review_payload("r2", user_id="user-2")])
    gateway.get_like_status.return_value = like(True, 7)

    await screen.load()

    assert screen.place.id == "p1"
    assert [r.id for r in screen.reviews] == ["r1", "r2"]
    assert screen.is_liked is True
    assert screen.likes_count == 7


async def test_review_and_like_failures_are_silent(screen, gateway, notifier):
    gateway.get_place.return_value = envelope(place_payload("p1"))
    gateway.get_reviews.return_value = HardFail(code=500, message="down")
    gateway.get_like_status.return_value = SoftFail("?")

    await screen.load()

    assert screen.reviews == []
    assert screen.is_liked is False
    assert notifier.history == []


async def test_place_failure_is_reported(screen, gateway, notifier):
    gateway.get_place.return_value = HardFail(code=404, message="Place not found")

    assert await screen.load_place() is False
    assert notifier.last == "Failed to load place details: 404 - Place not found"


async def test_toggle_like_replaces_local_state(screen, gateway, notifier):
    """Test that the server's like state replaces local state instead of merging."""
    screen.is_liked = False
    screen.likes_count = 3
    gateway.toggle_like.return_value = like(False, 10, message="Place unliked")

    state = await screen.toggle_like()

    assert state.is_liked is False
    assert screen.is_liked is False
    assert screen.likes_count == 10
    assert notifier.last == "Place unliked"


async def test_toggle_like_failure_keeps_state(screen, gateway, notifier):
    screen.is_liked = True
    screen.likes_count = 4
    gateway.toggle_like.return_value = HardFail(code=401, message="Not authorized")

    assert await screen.toggle_like() is None
    assert (screen.is_liked, screen.likes_count) == (True, 4)
    assert notifier.last == "Failed to update like: 401 - Not authorized"


async def test_rapid_double_tap_accepts_final_server_state(screen, gateway):
    responses = iter([like(True, 1), like(True, 2)])

    async def toggle(place_id):
        await asyncio.sleep(0)
        return next(responses)

    gateway.toggle_like.side_effect = toggle

    await asyncio.gather(screen.toggle_like(), screen.toggle_like())

    assert screen.is_liked is True
    assert screen.likes_count == 2


@pytest.mark.parametrize("rating, comment", [(0, "Great"), (6, "Great"), (5, ""), (5, "   "), (None, "Great")])
async def test_invalid_review_is_rejected_before_call(screen, gateway, rating, comment):
    with pytest.raises(ValidationError):
        await screen.add_review(rating, comment)
    gateway.add_review.assert_not_awaited()


async def test_add_review_reloads_reviews_and_place(screen, gateway, notifier):
    gateway.add_review.return_value = envelope(review_payload("r9", rating=5, comment="Great"))
    gateway.get_reviews.return_value = envelope([review_payload("r9", rating=5, comment="Great")])
    gateway.get_place.return_value = envelope(place_payload("p1", reviewsCount=2, averageRating=4.5))

    assert await screen.add_review(5, "  Great ") is True

    gateway.add_review.assert_awaited_once_with("p1", 5, "Great")
    assert screen.reviews[0].comment == "Great"
    assert screen.place.place.reviews_count == 2
    assert screen.place.place.average_rating == 4.5
    assert "Review added successfully" in notifier.history


async def test_add_review_failure_does_not_reload(screen, gateway, notifier):
    gateway.add_review.return_value = HardFail(code=400, message="You have already reviewed this place")

    assert await screen.add_review(4, "Again") is False

    gateway.get_reviews.assert_not_awaited()
    gateway.get_place.assert_not_awaited()
    assert notifier.last == "Failed to add review: 400 - You have already reviewed this place"


async def test_only_author_can_modify_review(screen):
    from touristguide.models import Review

    own = Review.model_validate(review_payload("r1", user_id="user-1"))
    other = Review.model_validate(review_payload("r2", user_id="user-2"))

    assert screen.can_modify_review(own) is True
    assert screen.can_modify_review(other) is False


async def test_delete_foreign_review_is_refused(screen, gateway):
    gateway.get_reviews.return_value = envelope([review_payload("r2", user_id="user-2")])
    await screen.load_reviews()

    with pytest.raises(AccessDeniedError):
        await screen.delete_review("r2")
    gateway.delete_review.assert_not_awaited()


async def test_delete_own_review_reloads(screen, gateway):
    gateway.get_reviews.side_effect = [envelope([review_payload("r1")]), envelope([])]
    gateway.get_place.return_value = envelope(place_payload("p1", reviewsCount=0, averageRating=0))
    gateway.delete_review.return_value = envelope(message="Review deleted")
    await screen.load_reviews()

    assert await screen.delete_review("r1") is True

    assert screen.reviews == []
    assert screen.place.place.reviews_count == 0


async def test_update_review(screen, gateway):
    gateway.get_reviews.side_effect = [
        envelope([review_payload("r1", rating=2)]),
        envelope([review_payload("r1", rating=4, comment="Better now")]),
    ]
    gateway.get_place.return_value = envelope(place_payload("p1"))
    gateway.update_review.return_value = envelope(review_payload("r1", rating=4, comment="Better now"))
    await screen.load_reviews()

    assert await screen.update_review("r1", 4, "Better now") is True

    gateway.update_review.assert_awaited_once_with("r1", 4, "Better now")
    assert screen.reviews[0].rating == 4


async def test_closed_screen_ignores_late_place(screen, gateway):
    release = asyncio.Event()

    async def get_place(place_id):
        await release.wait()
        return envelope(place_payload("p1"))

    gateway.get_place.side_effect = get_place
    pending = asyncio.create_task(screen.load_place())
    await asyncio.sleep(0)
    screen.close()
    release.set()

    assert await pending is False
    assert screen.place is None
