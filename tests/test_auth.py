"""
Unit tests for login, registration and logout.
"""

import pytest

from touristguide.controllers import AuthController
from touristguide.errors import ValidationError
from touristguide.utils.responses import HardFail, TransportError
from touristguide.utils.session import SessionStore
from tests.conftest import envelope

AUTH_DATA = {"id": "u1", "name": "Asha", "email": "asha@example.com", "role": "admin", "token": "tok-1"}


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def auth(gateway, store, notifier):
    return AuthController(gateway, store, notifier)


async def test_login_populates_session(auth, gateway, store, notifier):
    gateway.login.return_value = envelope(AUTH_DATA, message="Login successful")

    result = await auth.login(" asha@example.com ", "secret")

    assert result.token == "tok-1"
    gateway.login.assert_awaited_once_with("asha@example.com", "secret")
    assert store.is_logged_in() is True
    assert store.is_admin() is True
    assert store.get_user_id() == "u1"
    assert notifier.last == "Welcome back, Asha!"


@pytest.mark.parametrize("email, password, field", [
    ("", "secret", "email"),
    ("not-an-email", "secret", "email"),
    ("asha@example.com", "", "password"),
])
async def test_login_validation(auth, gateway, email, password, field):
    with pytest.raises(ValidationError) as exc:
        await auth.login(email, password)

    assert exc.value.field == field
    gateway.login.assert_not_awaited()


async def test_login_failure_leaves_session_empty(auth, gateway, store, notifier):
    gateway.login.return_value = HardFail(code=401, message="Invalid credentials")

    assert await auth.login("asha@example.com", "wrong-pass") is None

    assert store.is_logged_in() is False
    assert notifier.last == "Login failed: 401 - Invalid credentials"


async def test_login_with_malformed_data(auth, gateway, store, notifier):
    gateway.login.return_value = envelope({"name": "Asha"})

    assert await auth.login("asha@example.com", "secret") is None
    assert store.is_logged_in() is False
    assert notifier.last == "Login failed"


@pytest.mark.parametrize("name, email, password, confirm, field", [
    ("", "asha@example.com", "secret1", "secret1", "name"),
    ("Asha", "asha@", "secret1", "secret1", "email"),
    ("Asha", "asha@example.com", "", "", "password"),
    ("Asha", "asha@example.com", "12345", "12345", "password"),
    ("Asha", "asha@example.com", "secret1", "secret2", "confirm_password"),
])
async def test_register_validation(auth, gateway, name, email, password, confirm, field):
    with pytest.raises(ValidationError) as exc:
        await auth.register(name, email, password, confirm)

    assert exc.value.field == field
    gateway.register.assert_not_awaited()


async def test_register_success(auth, gateway, store, notifier):
    gateway.register.return_value = envelope({**AUTH_DATA, "role": "user"})

    assert await auth.register("Asha", "asha@example.com", "secret1", "secret1") is not None

    gateway.register.assert_awaited_once_with("Asha", "asha@example.com", "secret1")
    assert store.get_user_role() == "user"
    assert notifier.last == "Registration successful!"


async def test_logout_clears_session_even_if_server_fails(auth, gateway, store):
    store.save_auth_data("tok", "u1", "Asha", "asha@example.com", "user")
    gateway.logout.return_value = TransportError(cause="Connection error")

    await auth.logout()

    gateway.logout.assert_awaited_once()
    assert store.is_logged_in() is False
    assert store.get_token() is None


async def test_current_user_requires_session(auth, gateway):
    assert await auth.current_user() is None
    gateway.get_current_user.assert_not_awaited()
