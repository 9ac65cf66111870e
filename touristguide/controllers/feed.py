# touristguide/controllers/feed.py
import logging
from typing import Iterable, List, Optional

from ..config import config
from ..models import Category, PlaceView, parse_list, parse_places
from ..notifications import NotificationService
from ..utils.responses import Ok, describe
from ..utils.session import SessionStore
from .base import Controller

logger = logging.getLogger(__name__)

SEARCH_LIMITED_MESSAGE = "Coming soon: search is currently limited to places in {city}"


class PlaceFeedController(Controller):
    """Лента одобренных мест с фильтром по категории и поиском"""

    def __init__(
        self,
        gateway,
        session: SessionStore,
        notifier: Optional[NotificationService] = None,
        city: Optional[str] = None,
        search_areas: Optional[Iterable[str]] = None,
        max_foreign_length: Optional[int] = None,
    ):
        super().__init__(gateway, session, notifier)
        self.city = city or config.CITY
        self.search_areas = [area.lower() for area in (search_areas or config.SEARCH_AREAS)]
        self.max_foreign_length = (
            max_foreign_length if max_foreign_length is not None else config.SEARCH_MAX_FOREIGN_LENGTH
        )
        self.all_places: List[PlaceView] = []
        self.categories: List[Category] = []
        self.active_category_id: Optional[str] = None
        self.active_search_text: Optional[str] = None
        self._first_load = True

    async def refresh(self) -> bool:
        """Перезапросить ленту с текущим фильтром"""
        seq = self._next_request("places")
        first_load, self._first_load = self._first_load, False

        outcome = await self.gateway.get_places(
            category=self.active_category_id,
            search=self.active_search_text,
            city=self.city
        )
        if not self._is_current("places", seq):
            return False

        if isinstance(outcome, Ok):
            data = outcome.data if isinstance(outcome.data, list) else []
            views = parse_places(data)
            # Бэкенд должен отдавать только одобренные, но проверяем сами
            self.all_places = [view for view in views if view.place.is_approved]
            logger.info(f"Загружено {len(views)} мест, одобренных: {len(self.all_places)}")
            return True

        if first_load:
            # Пустая лента при холодном старте - не ошибка
            logger.info(f"Первая загрузка ленты не удалась: {outcome}")
        else:
            self.notifier.toast(describe(outcome, "Failed to load places"))
        return False

    async def set_category(self, category_id: Optional[str]) -> bool:
        self.active_category_id = category_id or None
        return await self.refresh()

    def is_local_search(self, text: str) -> bool:
        lowered = text.lower()
        if any(area in lowered for area in self.search_areas):
            return True
        return len(text) <= self.max_foreign_length

    async def search(self, text: Optional[str]) -> bool:
        """Поиск по местам города; запросы про другие города не отправляются"""
        text = (text or "").strip()
        if not text:
            return await self.clear_search()

        if not self.is_local_search(text):
            logger.info(f"Поиск '{text}' отклонён: вне {self.city}")
            self.notifier.toast(SEARCH_LIMITED_MESSAGE.format(city=self.city))
            return False

        self.active_search_text = text
        return await self.refresh()

    async def clear_search(self) -> bool:
        self.active_search_text = None
        return await self.refresh()

    async def load_categories(self) -> List[Category]:
        """Категории для фильтра; ошибки не показываются"""
        seq = self._next_request("categories")
        outcome = await self.gateway.get_categories()
        if not self._is_current("categories", seq):
            return self.categories
        if isinstance(outcome, Ok) and isinstance(outcome.data, list):
            self.categories = parse_list(Category, outcome.data, logger)
        else:
            logger.warning(f"Не удалось загрузить категории: {outcome}")
        return self.categories

    def forget(self, place_id: str) -> None:
        """Убрать удалённое место из ленты"""
        self.all_places = [view for view in self.all_places if view.id != place_id]
