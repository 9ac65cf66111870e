# touristguide/controllers/auth.py
import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from ..models import AuthData, User
from ..utils.responses import Ok, Outcome, describe
from ..utils.validation import (
    require_text,
    validate_email,
    validate_password,
    validate_password_match,
)
from .base import Controller

logger = logging.getLogger(__name__)


class AuthController(Controller):
    """Вход, регистрация и выход"""

    def _accept_auth(self, outcome: Outcome, fallback: str) -> Optional[AuthData]:
        if not isinstance(outcome, Ok):
            logger.warning(f"{fallback}: {outcome}")
            self.notifier.toast(describe(outcome, fallback))
            return None
        try:
            auth = AuthData.model_validate(outcome.data or {})
        except SchemaError as e:
            logger.error(f"Некорректные данные авторизации: {e}")
            self.notifier.toast(fallback)
            return None

        self.session.save_auth_data(
            token=auth.token,
            user_id=auth.id,
            name=auth.name,
            email=auth.email,
            role=auth.role.value
        )
        return auth

    async def login(self, email: str, password: str) -> Optional[AuthData]:
        email = validate_email(email)
        password = validate_password(password, check_length=False)

        outcome = await self.gateway.login(email, password)
        auth = self._accept_auth(outcome, "Login failed")
        if auth:
            self.notifier.toast(f"Welcome back, {auth.name}!")
        return auth

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> Optional[AuthData]:
        name = require_text("name", name, "Please enter your name")
        email = validate_email(email)
        password = validate_password(password)
        validate_password_match(password, confirm_password)

        outcome = await self.gateway.register(name, email, password)
        auth = self._accept_auth(outcome, "Registration failed")
        if auth:
            self.notifier.toast("Registration successful!")
        return auth

    async def current_user(self) -> Optional[User]:
        """Профиль по сохранённому токену"""
        if not self.session.is_logged_in():
            return None
        outcome = await self.gateway.get_current_user()
        if isinstance(outcome, Ok) and isinstance(outcome.data, dict):
            try:
                return User.model_validate(outcome.data)
            except SchemaError as e:
                logger.error(f"Некорректный профиль пользователя: {e}")
                return None
        logger.warning(f"Не удалось получить профиль: {outcome}")
        return None

    async def logout(self) -> None:
        """Выход: сервер уведомляется по возможности, сессия чистится всегда"""
        if self.session.is_logged_in():
            outcome = await self.gateway.logout()
            if not isinstance(outcome, Ok):
                logger.info(f"Logout на сервере не подтверждён: {outcome}")
        self.session.clear_auth_data()
        self.notifier.toast("Logged out")
