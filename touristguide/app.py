# touristguide/app.py
import logging
from typing import List, Optional

from .config import Settings, config
from .controllers import (
    AuthController,
    Controller,
    LikedPlacesController,
    ModerationController,
    MyPlacesController,
    PlaceEditor,
    PlaceEngagementController,
    PlaceFeedController,
)
from .notifications import NotificationService
from .utils.http_client import HTTPClient
from .utils.session import SessionStore

logger = logging.getLogger(__name__)


class TouristGuideApp:
    """
    Корневой объект клиента: сессия, HTTP-шлюз, уведомления и контроллеры
    экранов. Удаление места в одном экране убирает его из остальных.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_store: Optional[SessionStore] = None,
        notifier: Optional[NotificationService] = None,
        base_url: Optional[str] = None,
    ):
        self.settings = settings or config
        self.session_store = session_store or SessionStore(self.settings.SESSION_FILE)
        self.notifier = notifier or NotificationService()
        self.http_client = HTTPClient(
            session_store=self.session_store,
            base_url=base_url or self.settings.clean_api_base_url,
            timeout=self.settings.REQUEST_TIMEOUT,
        )

        self.auth = AuthController(self.http_client, self.session_store, self.notifier)
        self.feed = PlaceFeedController(
            self.http_client,
            self.session_store,
            self.notifier,
            city=self.settings.CITY,
            search_areas=self.settings.SEARCH_AREAS,
            max_foreign_length=self.settings.SEARCH_MAX_FOREIGN_LENGTH,
        )
        self.moderation = ModerationController(self.http_client, self.session_store, self.notifier)
        self.editor = PlaceEditor(self.http_client, self.session_store, self.notifier, default_city=self.settings.CITY)
        self.my_places = MyPlacesController(self.http_client, self.session_store, self.notifier)
        self.liked_places = LikedPlacesController(self.http_client, self.session_store, self.notifier)

        for source in (self.moderation, self.editor):
            source.add_removal_listener(self._forget_everywhere)

        self._screens: List[Controller] = []

    def _forget_everywhere(self, place_id: str) -> None:
        for screen in (self.feed, self.moderation, self.my_places, self.liked_places):
            screen.forget(place_id)

    def open_place(self, place_id: str) -> PlaceEngagementController:
        """Экран места; закрывается вызовом close() контроллера"""
        screen = PlaceEngagementController(self.http_client, self.session_store, place_id, self.notifier)
        self._screens.append(screen)
        return screen

    async def close(self):
        for screen in self._screens:
            screen.close()
        for controller in (self.feed, self.moderation, self.editor, self.my_places, self.liked_places):
            controller.close()
        await self.http_client.close()

    async def __aenter__(self) -> "TouristGuideApp":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
