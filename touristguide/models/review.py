# touristguide/models/review.py
from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from .base import BaseSchema, id_field
from .user import User


class Review(BaseSchema):
    """Отзыв о месте"""
    id: str = id_field()
    place: str
    user: User
    rating: int = Field(..., ge=1, le=5)
    comment: str
    created_at: Optional[datetime] = None

    @field_validator("place", mode="before")
    @classmethod
    def place_as_id(cls, v):
        # Иногда место приходит развёрнутым объектом
        if isinstance(v, dict):
            return v.get("_id") or v.get("id")
        return v

    @field_validator("user", mode="before")
    @classmethod
    def user_as_object(cls, v):
        if isinstance(v, str):
            return {"_id": v}
        return v


class LikeState(BaseSchema):
    """Ответ /likes/{placeId} и /likes/{placeId}/status"""
    is_liked: bool = False
    likes_count: int = Field(default=0, ge=0)
