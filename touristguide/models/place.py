# touristguide/models/place.py
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ..utils.images import resolve_image_urls
from .base import BaseSchema, id_field
from .category import Category
from .user import User

logger = logging.getLogger(__name__)


class Place(BaseSchema):
    """Место (точка интереса)"""
    id: str = id_field()
    name: str
    location: str = ""
    city: str = ""
    description: str = ""
    images: List[str] = Field(default_factory=list)
    link: Optional[str] = None
    category: Category
    added_by: Optional[User] = None
    is_approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    likes_count: int = Field(default=0, ge=0)
    reviews_count: int = Field(default=0, ge=0)
    average_rating: float = Field(default=0.0, ge=0, le=5)
    created_at: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def category_as_object(cls, v):
        # Непопулированная ссылка: пришёл только id категории
        if isinstance(v, str):
            return {"_id": v}
        return v

    @field_validator("added_by", mode="before")
    @classmethod
    def added_by_as_object(cls, v):
        if isinstance(v, str):
            return {"_id": v}
        return v

    @field_validator("approved_by", mode="before")
    @classmethod
    def approved_by_as_id(cls, v):
        if isinstance(v, dict):
            return v.get("_id") or v.get("id")
        return v


class PlacePermissions(BaseSchema):
    """Права текущего пользователя на место (считаются бэкендом на каждый запрос)"""
    can_edit: bool = False
    can_delete: bool = False
    is_owner: bool = False
    is_admin: bool = False

    def _is_privileged(self) -> bool:
        return self.is_owner or self.is_admin

    def allows_edit(self) -> bool:
        return self._is_privileged() and self.can_edit

    def allows_delete(self) -> bool:
        return self._is_privileged() and self.can_delete


class PlaceView(BaseModel):
    """Место в том виде, в каком его видит конкретный пользователь"""
    model_config = ConfigDict(frozen=True)

    place: Place
    permissions: Optional[PlacePermissions] = None

    @property
    def id(self) -> str:
        return self.place.id

    @property
    def can_edit(self) -> bool:
        return self.permissions is not None and self.permissions.allows_edit()

    @property
    def can_delete(self) -> bool:
        return self.permissions is not None and self.permissions.allows_delete()

    def image_urls(self, base_url: str) -> List[str]:
        """Полные адреса фотографий места"""
        return resolve_image_urls(self.place.images, base_url)

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "PlaceView":
        # permissions не попадают в Place: extra="ignore"
        permissions = raw.get("permissions")
        return cls(
            place=Place.model_validate(raw),
            permissions=PlacePermissions.model_validate(permissions) if isinstance(permissions, dict) else None,
        )


def parse_places(items: Optional[Iterable[Any]]) -> List[PlaceView]:
    """Разбор списка мест; битые элементы пропускаются"""
    views: List[PlaceView] = []
    for raw in items or []:
        if not isinstance(raw, dict):
            logger.warning(f"Пропущен элемент списка мест неожиданного типа: {type(raw).__name__}")
            continue
        try:
            views.append(PlaceView.from_payload(raw))
        except ValidationError as e:
            logger.warning(f"Пропущено место {raw.get('_id', raw.get('id'))}: {e.error_count()} ошибок валидации")
    return views
