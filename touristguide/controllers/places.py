# touristguide/controllers/places.py
"""
Добавление и редактирование мест, личные списки (мои места, понравившиеся).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from pydantic import ValidationError as SchemaError

from ..config import config
from ..errors import AccessDeniedError
from ..models import Category, PlaceView, parse_list, parse_places
from ..notifications import NotificationService
from ..utils.responses import Ok, Outcome, describe
from ..utils.session import SessionStore
from ..utils.validation import require_text, validate_category
from .base import Controller

logger = logging.getLogger(__name__)


@dataclass
class PlaceDraft:
    """Данные формы добавления/редактирования места"""
    name: str
    location: str
    description: str
    category_id: Optional[str]
    city: Optional[str] = None
    link: Optional[str] = None
    images: List[str] = field(default_factory=list)


class PlaceEditor(Controller):
    """Форма места: создание, правка, удаление"""

    def __init__(
        self,
        gateway,
        session: SessionStore,
        notifier: Optional[NotificationService] = None,
        default_city: Optional[str] = None,
    ):
        super().__init__(gateway, session, notifier)
        self.default_city = default_city or config.CITY
        self.categories: List[Category] = []

    async def load_categories(self) -> List[Category]:
        outcome = await self.gateway.get_categories()
        if isinstance(outcome, Ok) and isinstance(outcome.data, list):
            self.categories = parse_list(Category, outcome.data, logger)
        else:
            self.notifier.toast("Failed to load categories")
        return self.categories

    def _fields(self, draft: PlaceDraft) -> Dict[str, Optional[str]]:
        name = require_text("name", draft.name, "Please enter place name")
        location = require_text("location", draft.location, "Please enter location")
        description = require_text("description", draft.description, "Please enter description")
        category = validate_category(draft.category_id)
        link = (draft.link or "").strip()
        return {
            "name": name,
            "location": location,
            "city": (draft.city or "").strip() or self.default_city,
            "description": description,
            "category": category,
            "link": link or None,
        }

    def _view_from(self, outcome: Ok) -> Optional[PlaceView]:
        if not isinstance(outcome.data, dict):
            return None
        try:
            return PlaceView.from_payload(outcome.data)
        except SchemaError as e:
            logger.warning(f"Ответ с местом не разобран: {e.error_count()} ошибок")
            return None

    async def load_for_edit(self, place_id: str) -> Optional[PlaceView]:
        """Загрузить место для формы редактирования"""
        outcome = await self.gateway.get_place(place_id)
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to load place data"))
            return None
        view = self._view_from(outcome)
        if view is None:
            self.notifier.toast("Failed to load place data")
            return None
        if not view.can_edit:
            raise AccessDeniedError("You cannot edit this place")
        return view

    async def submit(self, draft: PlaceDraft) -> Optional[PlaceView]:
        """Новое место уходит на модерацию"""
        fields = self._fields(draft)
        outcome = await self.gateway.create_place(fields, draft.images)
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to add place"))
            return None
        logger.info(f"➕ Место '{fields['name']}' отправлено на модерацию")
        self.notifier.toast(outcome.message or "Place submitted for approval")
        return self._view_from(outcome)

    async def update(self, place_id: str, draft: PlaceDraft) -> Optional[PlaceView]:
        """Правка места; изображения отправляются, только если выбраны новые"""
        fields = self._fields(draft)
        outcome = await self.gateway.update_place(place_id, fields, draft.images or None)
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to update place"))
            return None
        self.notifier.toast("Place updated successfully")
        return self._view_from(outcome)

    async def delete(self, place: Union[str, PlaceView]) -> bool:
        """Удаление места владельцем или администратором"""
        if isinstance(place, PlaceView):
            if not place.can_delete:
                raise AccessDeniedError("You cannot delete this place")
            place_id = place.id
        else:
            place_id = place

        outcome = await self.gateway.delete_place(place_id)
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to delete place"))
            return False
        self._notify_removed(place_id)
        self.notifier.toast("Place deleted successfully")
        return True

    async def create_category(
        self,
        name: str,
        icon: Optional[str] = None,
        description: Optional[str] = None
    ) -> Optional[Category]:
        """Новая категория (только администратор)"""
        self._require_admin()
        name = require_text("name", name, "Please enter category name")
        outcome = await self.gateway.create_category(name, icon, description)
        if not isinstance(outcome, Ok) or not isinstance(outcome.data, dict):
            self.notifier.toast(describe(outcome, "Failed to create category"))
            return None
        try:
            category = Category.model_validate(outcome.data)
        except SchemaError as e:
            logger.error(f"Некорректный ответ при создании категории: {e}")
            self.notifier.toast("Failed to create category")
            return None
        self.categories.append(category)
        return category


class _PlaceListController(Controller, ABC):
    """Список мест без фильтров, перечитывается целиком"""

    failure_message = "Failed to load places"

    def __init__(self, gateway, session: SessionStore, notifier: Optional[NotificationService] = None):
        super().__init__(gateway, session, notifier)
        self.places: List[PlaceView] = []

    @abstractmethod
    async def _fetch(self) -> Outcome:
        """Запрос списка к API"""

    async def load(self) -> List[PlaceView]:
        seq = self._next_request("places")
        outcome = await self._fetch()
        if not self._is_current("places", seq):
            return self.places
        if isinstance(outcome, Ok):
            data = outcome.data if isinstance(outcome.data, list) else []
            self.places = parse_places(data)
        else:
            self.notifier.toast(describe(outcome, self.failure_message))
        return self.places

    def forget(self, place_id: str) -> None:
        self.places = [view for view in self.places if view.id != place_id]


class MyPlacesController(_PlaceListController):
    """Места текущего пользователя, включая ожидающие модерации"""

    async def _fetch(self):
        return await self.gateway.get_my_places()


class LikedPlacesController(_PlaceListController):
    """Понравившиеся места"""

    failure_message = "Failed to load liked places"

    async def _fetch(self):
        return await self.gateway.get_liked_places()
