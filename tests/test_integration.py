"""
Integration tests: the real aiohttp client against the in-memory mock backend.
"""

import pytest_asyncio

from touristguide.app import TouristGuideApp
from touristguide.controllers import PlaceDraft
from touristguide.mock_server import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    APPROVE_BARE_STRING,
    APPROVE_EMPTY_BODY,
    APPROVE_ERROR_STRING,
    PLACES_BARE_STRING,
)
from touristguide.models import ModerationState
from touristguide.notifications import NotificationService
from touristguide.utils.http_client import HTTPClient
from touristguide.utils.responses import HardFail, Ok, SoftFail, TransportError
from touristguide.utils.session import SessionStore


@pytest_asyncio.fixture
async def visitor(backend, app):
    """Regular user logged in through the API."""
    backend.add_user("Asha", "asha@example.com", "secret1")
    await app.auth.login("asha@example.com", "secret1")
    return app


def seed_places(backend, count=3, approved=False):
    owner = next(u["_id"] for u in backend.users.values() if u["role"] == "admin")
    category = backend.category_id("Parks")
    return [
        backend.add_place(f"Garden {i}", category, owner, approved=approved, location="Adajan")
        for i in range(1, count + 1)
    ]


async def test_admin_approves_one_of_three_pending(backend, app):
    """Scenario: admin login, three pending places, approve the second."""
    place1, place2, place3 = seed_places(backend)

    assert await app.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD) is not None
    assert app.session_store.get_user_role() == "admin"

    pending = await app.moderation.list_pending()
    assert {view.id for view in pending} == {place1, place2, place3}

    assert await app.moderation.approve(place2) is True

    remaining = await app.moderation.list_pending()
    assert {view.id for view in remaining} == {place1, place3}
    assert app.moderation.state_of(place2) == ModerationState.APPROVED


async def test_feed_shows_only_approved(backend, visitor):
    approved = seed_places(backend, count=2, approved=True)
    seed_places(backend, count=2, approved=False)

    assert await visitor.feed.refresh() is True

    assert {view.id for view in visitor.feed.all_places} == set(approved)
    assert all(view.place.is_approved for view in visitor.feed.all_places)


async def test_feed_category_and_search(backend, visitor):
    owner = backend.admin_id
    food = backend.category_id("Food")
    parks = backend.category_id("Parks")
    locho = backend.add_place("Locho House", food, owner, approved=True, location="Vesu")
    backend.add_place("Sarthana Nature Park", parks, owner, approved=True, location="Sarthana")

    await visitor.feed.set_category(food)
    assert [view.id for view in visitor.feed.all_places] == [locho]

    await visitor.feed.set_category(None)
    await visitor.feed.search("vesu")
    assert [view.id for view in visitor.feed.all_places] == [locho]


async def test_toggle_like_twice_restores_state(backend, visitor):
    (place_id,) = seed_places(backend, count=1, approved=True)
    screen = visitor.open_place(place_id)
    await screen.load()
    before = (screen.is_liked, screen.likes_count)

    first = await screen.toggle_like()
    second = await screen.toggle_like()

    assert first.is_liked is not before[0]
    assert (second.is_liked, second.likes_count) == before
    assert (screen.is_liked, screen.likes_count) == before


async def test_add_review_round_trip(backend, visitor):
    (place_id,) = seed_places(backend, count=1, approved=True)
    screen = visitor.open_place(place_id)
    await screen.load()
    reviews_before = screen.place.place.reviews_count

    assert await screen.add_review(5, "Great") is True

    assert any(r.rating == 5 and r.comment == "Great" for r in screen.reviews)
    assert screen.place.place.reviews_count == reviews_before + 1
    assert screen.place.place.average_rating == 5.0
    assert all(screen.can_modify_review(r) for r in screen.reviews)


async def test_delete_review_recomputes_aggregates(backend, visitor):
    (place_id,) = seed_places(backend, count=1, approved=True)
    screen = visitor.open_place(place_id)
    await screen.add_review(3, "Okay")

    assert await screen.delete_review(screen.reviews[0].id) is True

    assert screen.reviews == []
    assert screen.place.place.reviews_count == 0
    assert screen.place.place.average_rating == 0.0


async def test_submitted_place_waits_for_moderation(backend, visitor, tmp_path):
    image = tmp_path / "garden.jpg"
    image.write_bytes(b"\xff\xd8\xff")
    draft = PlaceDraft(
        name="Gopi Talav",
        location="Gopipura",
        description="Historic lake",
        category_id=backend.category_id("Heritage"),
        images=[str(image), str(tmp_path / "missing.jpg")],
    )

    view = await visitor.editor.submit(draft)

    assert view.place.is_approved is False
    assert view.place.city == "Surat"
    assert len(view.place.images) == 1
    assert view.can_edit is True
    mine = await visitor.my_places.load()
    assert [v.id for v in mine] == [view.id]
    await visitor.feed.refresh()
    assert view.id not in {v.id for v in visitor.feed.all_places}


async def test_moderation_delete_removes_place_from_feed(backend, app):
    (place_id,) = seed_places(backend, count=1, approved=False)
    await app.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    await app.moderation.list_pending()

    assert await app.moderation.delete(place_id) is True

    assert app.moderation.pending == []
    assert place_id not in backend.places


async def test_approve_with_bare_string_body(backend, app):
    backend.quirks.add(APPROVE_BARE_STRING)
    (place_id,) = seed_places(backend, count=1)
    await app.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert await app.moderation.approve(place_id) is True
    assert app.moderation.pending == []


async def test_approve_with_empty_body(backend, app):
    backend.quirks.add(APPROVE_EMPTY_BODY)
    (place_id,) = seed_places(backend, count=1)
    await app.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert await app.moderation.approve(place_id) is True


async def test_approve_with_error_string_body(backend, app):
    backend.quirks.add(APPROVE_ERROR_STRING)
    (place_id,) = seed_places(backend, count=1)
    await app.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert await app.moderation.approve(place_id) is False
    assert [view.id for view in app.moderation.pending] == [place_id]


async def test_bare_string_place_list_is_soft_fail(backend, visitor):
    backend.quirks.add(PLACES_BARE_STRING)

    outcome = await visitor.http_client.get_places(city="Surat")

    assert isinstance(outcome, SoftFail)
    assert await visitor.feed.refresh() is False
    assert visitor.feed.all_places == []
    assert visitor.notifier.last == "Welcome back, Asha!"


async def test_pending_requires_admin_on_server(backend, visitor):
    outcome = await visitor.http_client.get_pending_places()

    assert outcome == HardFail(code=403, message="Admin access required")


async def test_bearer_token_is_attached(backend, visitor):
    outcome = await visitor.http_client.get_current_user()

    assert isinstance(outcome, Ok)
    assert outcome.data["email"] == "asha@example.com"


async def test_logout_forgets_token(backend, visitor):
    await visitor.auth.logout()

    outcome = await visitor.http_client.get_current_user()

    assert visitor.session_store.is_logged_in() is False
    assert isinstance(outcome, HardFail)
    assert outcome.code == 401


async def test_register_then_duplicate(backend, app):
    assert await app.auth.register("Ravi", "ravi@example.com", "secret1", "secret1") is not None
    assert app.session_store.get_user_role() == "user"

    assert await app.auth.register("Ravi", "ravi@example.com", "secret1", "secret1") is None
    assert app.notifier.last == "Registration failed: 400 - User already exists"


async def test_unreachable_server_is_transport_error():
    client = HTTPClient(session_store=SessionStore(), base_url="http://127.0.0.1:1/api", timeout=5)
    try:
        outcome = await client.get_places()
        assert isinstance(outcome, TransportError)
        assert await client.check_api_health() is False
    finally:
        await client.close()


async def test_app_close_discards_open_screens(backend, api_url):
    client_app = TouristGuideApp(session_store=SessionStore(), notifier=NotificationService(), base_url=api_url)
    screen = client_app.open_place("p1")

    await client_app.close()

    assert screen.closed is True
    assert client_app.feed.closed is True
