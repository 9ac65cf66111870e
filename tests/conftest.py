"""
Shared fixtures.

Unit tests use an AsyncMock gateway; integration tests run the real
aiohttp client against the in-memory mock backend.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from touristguide.app import TouristGuideApp
from touristguide.mock_server import MockBackend
from touristguide.notifications import NotificationService
from touristguide.utils.http_client import HTTPClient
from touristguide.utils.responses import Ok
from touristguide.utils.session import SessionStore


def place_payload(place_id: str, approved: bool = True, name: str = None, permissions: dict = None, **extra) -> dict:
    """Place as the backend serializes it."""
    payload = {
        "_id": place_id,
        "name": name or f"Place {place_id}",
        "location": "Dumas Road",
        "city": "Surat",
        "description": "A nice spot",
        "images": ["/uploads/a.jpg"],
        "category": {"_id": "cat-1", "name": "Parks"},
        "addedBy": {"_id": "user-1", "name": "Asha", "email": "asha@example.com", "role": "user"},
        "isApproved": approved,
        "likesCount": 2,
        "reviewsCount": 1,
        "averageRating": 4.0,
        "createdAt": "2024-06-01T10:00:00Z",
    }
    if permissions is not None:
        payload["permissions"] = permissions
    payload.update(extra)
    return payload


def review_payload(review_id: str, user_id: str = "user-1", rating: int = 4, comment: str = "Nice") -> dict:
    return {
        "_id": review_id,
        "place": "p1",
        "user": {"_id": user_id, "name": "Asha", "email": "asha@example.com", "role": "user"},
        "rating": rating,
        "comment": comment,
        "createdAt": "2024-06-02T10:00:00Z",
    }


def envelope(data=None, message=None) -> Ok:
    payload = {"success": True}
    if data is not None:
        payload["data"] = data
    if message is not None:
        payload["message"] = message
    return Ok(payload=payload)


@pytest.fixture
def session():
    """Logged-in regular user."""
    store = SessionStore()
    store.save_auth_data("token-user", "user-1", "Asha", "asha@example.com", "user")
    return store


@pytest.fixture
def admin_session():
    store = SessionStore()
    store.save_auth_data("token-admin", "admin-1", "Admin", "admin@example.com", "admin")
    return store


@pytest.fixture
def notifier():
    return NotificationService()


@pytest.fixture
def gateway():
    return AsyncMock(spec=HTTPClient)


@pytest.fixture
def backend():
    return MockBackend()


@pytest_asyncio.fixture
async def api_url(backend):
    server = TestServer(backend.make_app())
    await server.start_server()
    yield str(server.make_url("/api"))
    await server.close()


@pytest_asyncio.fixture
async def app(api_url):
    client_app = TouristGuideApp(session_store=SessionStore(), notifier=NotificationService(), base_url=api_url)
    yield client_app
    await client_app.close()
