# touristguide/utils/http_client.py
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import aiohttp

from ..config import config
from .responses import Outcome, TransportError, normalize
from .session import SessionStore

logger = logging.getLogger(__name__)


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class HTTPClient:
    """Шлюз к REST API справочника. Каждый метод возвращает нормализованный Outcome."""

    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.session: Optional[aiohttp.ClientSession] = None
        self.session_store = session_store or SessionStore(config.SESSION_FILE)
        self.base_url = (base_url or config.clean_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        logger.info(f"HTTP клиент инициализирован. Base URL: {self.base_url}")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"}
            )
        return self.session

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session_store.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _make_request(self, method: str, endpoint: str, auth: bool = True, **kwargs) -> Outcome:
        """Универсальный метод для запросов"""
        session = await self._get_session()
        headers = kwargs.pop("headers", {})
        if auth:
            headers.update(self._auth_headers())
        if "params" in kwargs:
            kwargs["params"] = _drop_none(kwargs["params"])

        try:
            logger.debug(f"{method} {endpoint} params={kwargs.get('params', {})}")

            async with session.request(method, self._url(endpoint), headers=headers, **kwargs) as response:
                response_text = await response.text(errors="replace")
                logger.debug(f"Raw response ({response.status}): {response_text[:200]}")

                if response.status >= 300:
                    logger.warning(f"HTTP {response.status} from {endpoint}: {response_text[:200]}")

                return normalize(response.status, response_text)

        except asyncio.TimeoutError:
            logger.error(f"Timeout for {method} {endpoint}")
            return TransportError(cause="Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"Connection error to {endpoint}: {e}")
            return TransportError(cause=f"Connection error: {e}")

    @staticmethod
    def _place_form(fields: Dict[str, Optional[str]], images: Optional[Iterable[str]]) -> aiohttp.FormData:
        """multipart: текстовые поля + файлы `images`; нечитаемые файлы пропускаются"""
        form = aiohttp.FormData()
        for name, value in fields.items():
            if value is not None:
                form.add_field(name, value, content_type="text/plain")
        for image_path in images or []:
            path = Path(image_path)
            try:
                content = path.read_bytes()
            except OSError as e:
                logger.warning(f"Пропущено изображение {image_path}: {e}")
                continue
            form.add_field("images", content, filename=path.name, content_type="image/*")
        return form

    async def check_api_health(self) -> bool:
        """Доступен ли API (любой HTTP-ответ считается доступностью)"""
        outcome = await self._make_request("GET", "/categories", auth=False)
        return not isinstance(outcome, TransportError)

    # --- Аутентификация ---
    async def register(self, name: str, email: str, password: str) -> Outcome:
        """Регистрация"""
        data = {"name": name, "email": email, "password": password}
        return await self._make_request("POST", "/auth/register", auth=False, json=data)

    async def login(self, email: str, password: str) -> Outcome:
        """Вход"""
        data = {"email": email, "password": password}
        return await self._make_request("POST", "/auth/login", auth=False, json=data)

    async def get_current_user(self) -> Outcome:
        """Текущий пользователь по токену"""
        return await self._make_request("GET", "/auth/me")

    async def logout(self) -> Outcome:
        return await self._make_request("POST", "/auth/logout")

    # --- Места ---
    async def get_places(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        city: Optional[str] = None
    ) -> Outcome:
        """Получение списка мест"""
        params = {"category": category, "search": search, "city": city}
        return await self._make_request("GET", "/places", params=params)

    async def get_my_places(self) -> Outcome:
        """Места, добавленные текущим пользователем (включая ожидающие модерации)"""
        return await self._make_request("GET", "/places/user/my-places")

    async def get_place(self, place_id: str) -> Outcome:
        """Получение конкретного места"""
        return await self._make_request("GET", f"/places/{place_id}")

    async def create_place(
        self,
        fields: Dict[str, Optional[str]],
        images: Optional[Iterable[str]] = None
    ) -> Outcome:
        """Добавление места (уходит на модерацию)"""
        return await self._make_request("POST", "/places", data=self._place_form(fields, images))

    async def update_place(
        self,
        place_id: str,
        fields: Dict[str, Optional[str]],
        images: Optional[Iterable[str]] = None
    ) -> Outcome:
        """Частичное обновление места"""
        return await self._make_request("PUT", f"/places/{place_id}", data=self._place_form(fields, images))

    async def delete_place(self, place_id: str) -> Outcome:
        return await self._make_request("DELETE", f"/places/{place_id}")

    # --- Модерация ---
    async def get_pending_places(self) -> Outcome:
        """Места на модерации"""
        return await self._make_request("GET", "/places/pending")

    async def approve_place(self, place_id: str) -> Outcome:
        """Одобрение места (формат тела ответа ненадёжен)"""
        return await self._make_request("PUT", f"/places/{place_id}/approve")

    # --- Категории ---
    async def get_categories(self) -> Outcome:
        return await self._make_request("GET", "/categories")

    async def create_category(
        self,
        name: str,
        icon: Optional[str] = None,
        description: Optional[str] = None
    ) -> Outcome:
        data = _drop_none({"name": name, "icon": icon, "description": description})
        return await self._make_request("POST", "/categories", json=data)

    # --- Лайки ---
    async def toggle_like(self, place_id: str) -> Outcome:
        """Переключение лайка"""
        return await self._make_request("POST", f"/likes/{place_id}")

    async def get_liked_places(self) -> Outcome:
        return await self._make_request("GET", "/likes")

    async def get_like_status(self, place_id: str) -> Outcome:
        return await self._make_request("GET", f"/likes/{place_id}/status")

    # --- Отзывы ---
    async def get_reviews(self, place_id: str) -> Outcome:
        """Отзывы места"""
        return await self._make_request("GET", f"/reviews/{place_id}")

    async def add_review(self, place_id: str, rating: int, comment: str) -> Outcome:
        """Создание отзыва"""
        logger.info(f"Отправка отзыва на место {place_id}, оценка: {rating}, текст: {comment[:50]}...")
        return await self._make_request(
            "POST",
            f"/reviews/{place_id}",
            json={"rating": rating, "comment": comment}
        )

    async def update_review(self, review_id: str, rating: int, comment: str) -> Outcome:
        return await self._make_request(
            "PUT",
            f"/reviews/{review_id}",
            json={"rating": rating, "comment": comment}
        )

    async def delete_review(self, review_id: str) -> Outcome:
        """Удаление отзыва"""
        return await self._make_request("DELETE", f"/reviews/{review_id}")
